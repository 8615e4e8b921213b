"""
Pytest fixtures for pyreducthor tests.
"""

import asyncio
from typing import Any, List, Optional, Sequence

import pytest

from pyreducthor import DevToolsMiddleware, global_error_handler
from pyreducthor.transport import RequestConfig


class FakeTransport:
    """Scripted transport: records every config and fires the given progress events."""

    def __init__(
        self,
        response: Any = None,
        error: Optional[BaseException] = None,
        upload_events: Sequence[dict] = (),
        download_events: Sequence[dict] = (),
    ):
        self.response = response
        self.error = error
        self.upload_events = list(upload_events)
        self.download_events = list(download_events)
        self.calls: List[RequestConfig] = []

    async def request(self, config: RequestConfig) -> Any:
        self.calls.append(config)
        for event in self.upload_events:
            config.on_upload_progress(event)
        await asyncio.sleep(0)
        for event in self.download_events:
            config.on_download_progress(event)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def devtools() -> DevToolsMiddleware:
    """Records every dispatched action in order."""
    return DevToolsMiddleware()


@pytest.fixture
def fake_transport() -> FakeTransport:
    """Transport that succeeds with a small JSON-like payload."""
    return FakeTransport(response={"id": 10, "title": "Mostro"})


@pytest.fixture
def reported_errors():
    """Collect everything passed to the global error handler during a test."""
    seen: List[Any] = []
    handler = seen.append
    global_error_handler.register_handler(handler)
    yield seen
    global_error_handler.handlers.remove(handler)


def run(coro):
    """Run a coroutine on a fresh event loop."""
    return asyncio.run(coro)
