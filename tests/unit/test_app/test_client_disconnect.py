"""Client disconnects abort the storage call through the full application stack."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from storage_api.core.settings import clear_all_caches
from storage_api.features.storage.cancellation import CLIENT_CLOSED_REQUEST
from storage_api.infra.storage.dependencies import get_storage


def _http_scope(method: str, path: str) -> dict:
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": b"",
        "headers": [(b"host", b"test"), (b"x-request-id", b"req-gone")],
        "client": ("127.0.0.1", 50000),
        "server": ("test", 80),
    }


def _disconnecting_receive():
    """Deliver the (empty) request body, then report the client as gone."""
    messages = [{"type": "http.request", "body": b"", "more_body": False}]

    # Must not await: Starlette probes it inside an already-cancelled scope
    async def receive() -> dict:
        if messages:
            return messages.pop(0)
        return {"type": "http.disconnect"}

    return receive


@pytest.fixture
def slow_storage(mock_storage: AsyncMock) -> tuple[AsyncMock, asyncio.Event, asyncio.Event]:
    """Storage whose list_buckets hangs until cancelled."""
    started = asyncio.Event()
    cancelled = asyncio.Event()

    async def hang():
        started.set()
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise
        return []

    mock_storage.list_buckets.side_effect = hang
    return mock_storage, started, cancelled


@pytest.mark.unit
class TestClientDisconnect:
    async def test_disconnect_cancels_call_and_ends_with_499(
        self,
        monkeypatch: pytest.MonkeyPatch,
        slow_storage: tuple[AsyncMock, asyncio.Event, asyncio.Event],
    ):
        from storage_api.app.main import create_app

        monkeypatch.setenv("APP_DISCONNECT_POLL_INTERVAL", "0.01")
        clear_all_caches()
        storage, started, cancelled = slow_storage
        app = create_app()
        app.dependency_overrides[get_storage] = lambda: storage

        sent: list[dict] = []

        async def send(message: dict) -> None:
            sent.append(message)

        await asyncio.wait_for(
            app(_http_scope("GET", "/list-buckets"), _disconnecting_receive(), send),
            timeout=5,
        )
        await asyncio.wait_for(cancelled.wait(), timeout=1)

        assert started.is_set()
        storage.list_buckets.assert_awaited_once()
        start = next(m for m in sent if m["type"] == "http.response.start")
        assert start["status"] == CLIENT_CLOSED_REQUEST
        headers = dict(start["headers"])
        assert headers[b"x-request-id"] == b"req-gone"
        body = b"".join(m.get("body", b"") for m in sent if m["type"] == "http.response.body")
        assert body == b""

    async def test_connected_client_gets_result(
        self,
        monkeypatch: pytest.MonkeyPatch,
        mock_storage: AsyncMock,
    ):
        from storage_api.app.main import create_app

        monkeypatch.setenv("APP_DISCONNECT_POLL_INTERVAL", "0.01")
        clear_all_caches()
        mock_storage.list_buckets.return_value = []
        app = create_app()
        app.dependency_overrides[get_storage] = lambda: mock_storage

        async def receive() -> dict:
            return {"type": "http.request", "body": b"", "more_body": False}

        sent: list[dict] = []

        async def send(message: dict) -> None:
            sent.append(message)

        await app(_http_scope("GET", "/list-buckets"), receive, send)

        start = next(m for m in sent if m["type"] == "http.response.start")
        assert start["status"] == 200
