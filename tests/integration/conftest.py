"""Integration fixtures: a fake Bitbucket API behind httpx.MockTransport.

Only the network is faked; the executor, retry loop, error taxonomy and
handlers all run for real.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

API = "https://api.bitbucket.org/2.0"


class FakeBitbucket:
    """Serves queued responses per URL path and records every request.

    Responses for a path are consumed in order; the last one repeats.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._routes: dict[str, list] = {}

    def add(self, path, status=200, json=None, text=None, headers=None):
        self._routes.setdefault(path, []).append(("response", status, json, text, headers))
        return self

    def add_timeout(self, path):
        self._routes.setdefault(path, []).append(("timeout",))
        return self

    def add_error(self, path, exc_class):
        self._routes.setdefault(path, []).append(("error", exc_class))
        return self

    def calls(self, path=None):
        if path is None:
            return len(self.requests)
        return sum(1 for r in self.requests if r.url.path == path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._routes.get(request.url.path)
        if not queue:
            return httpx.Response(404, json={"error": {"message": f"No route for {request.url.path}"}})
        entry = queue.pop(0) if len(queue) > 1 else queue[0]

        if entry[0] == "timeout":
            raise httpx.ReadTimeout("timed out", request=request)
        if entry[0] == "error":
            raise entry[1]("connection failed", request=request)

        _, status, json_body, text, headers = entry
        if json_body is not None:
            return httpx.Response(status, json=json_body, headers=headers)
        return httpx.Response(status, text=text or "", headers=headers)


@pytest.fixture
def api(monkeypatch):
    """Route every httpx.AsyncClient created by the executor to a FakeBitbucket."""
    fake = FakeBitbucket()
    transport = httpx.MockTransport(fake.handler)
    real_client = httpx.AsyncClient

    def client_factory(**kwargs):
        kwargs["transport"] = transport
        return real_client(**kwargs)

    monkeypatch.setattr("bitbucket_mcp.client.httpx.AsyncClient", client_factory)
    return fake


@pytest.fixture(autouse=True)
def no_sleep():
    """Patch out backoff sleeps; the mock records the requested delays."""
    with patch("bitbucket_mcp.client.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep
