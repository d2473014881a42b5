"""Abort in-flight storage calls when the HTTP client goes away.

ASGI servers keep running a handler after its client disconnects. Storage
calls are raced against a disconnect watcher so an aborted request also
aborts its provider call.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from starlette.requests import Request

T = TypeVar("T")

logger = logging.getLogger(__name__)

# nginx's "client closed request"; never reaches the client, only logs.
CLIENT_CLOSED_REQUEST = 499


class ClientDisconnectedError(Exception):
    """The inbound connection closed before the storage call finished."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Client disconnected during {path}")


async def run_until_disconnected(
    request: Request,
    awaitable: Awaitable[T],
    poll_interval: float = 0.1,
) -> T:
    """Await ``awaitable`` unless the client disconnects first.

    Args:
        request: Inbound request whose connection is watched.
        awaitable: The storage call.
        poll_interval: Seconds between disconnect checks.

    Returns:
        The awaitable's result.

    Raises:
        ClientDisconnectedError: If the client went away; the storage call
            has been cancelled.
        Exception: Whatever the storage call raised.
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info(
                    "Client disconnected, cancelling storage call",
                    extra={"path": request.url.path},
                )
                task.cancel()
                raise ClientDisconnectedError(request.url.path)
    finally:
        if not task.done():
            task.cancel()
