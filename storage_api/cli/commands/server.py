"""Server command."""

import click
import uvicorn

from storage_api.cli.utils import info, warning
from storage_api.core.settings import get_app_settings, get_logging_settings


@click.command(name="serve")
@click.option(
    "--host",
    default=None,
    help="Host to bind (default: from settings or 0.0.0.0)",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Port to bind (default: from settings or 8000)",
)
@click.option(
    "--reload/--no-reload",
    default=False,
    help="Enable auto-reload on code changes",
)
@click.option(
    "--workers",
    default=1,
    type=int,
    help="Number of worker processes (ignored with --reload)",
)
def serve(host: str | None, port: int | None, reload: bool, workers: int) -> None:
    """Run the HTTP server with uvicorn."""
    settings = get_app_settings()
    log_settings = get_logging_settings()
    host = host or settings.host
    port = port or settings.port

    if reload and workers > 1:
        warning("--reload is incompatible with --workers > 1. Setting workers to 1.")
        workers = 1

    info(f"Server will run at: http://{host}:{port}")
    info(f"Environment: {settings.environment}")
    if settings.docs_enabled:
        info(f"API docs: http://{host}:{port}{settings.docs_url}")

    uvicorn.run(
        "storage_api.app.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=log_settings.level.lower(),
    )
