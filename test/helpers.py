import json


class FakeResponse:
    """``body`` may be given as text or raw bytes; otherwise ``payload`` is sent as JSON."""

    def __init__(self, status: int = 200, payload=None, body: str | bytes | None = None):
        self.status = status
        if body is None:
            body = json.dumps(payload)
        self._body = body.encode("utf-8") if isinstance(body, str) else body

    async def read(self):
        return self._body


class _RequestContext:
    def __init__(self, outcome):
        self.outcome = outcome

    async def __aenter__(self):
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession: answers from ``routes`` and records every request."""

    def __init__(self, routes: dict | None = None):
        self.routes = routes or {}
        self.calls = []

    def request(self, method, url, headers=None):
        self.calls.append((method, url, headers))
        outcome = self.routes.get(url, FakeResponse(404, {"error": "Not found"}))
        return _RequestContext(outcome)

    @property
    def urls(self):
        return [url for _, url, _ in self.calls]
