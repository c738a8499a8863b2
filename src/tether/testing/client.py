"""Async test client for tether host apps.

Sends requests through the ASGI interface directly, with no network
and no server process, and returns the same ``HttpResponse`` the
dispatcher produced.
"""

import json as json_module
from typing import Any
from urllib.parse import urlencode

from tether.http.response import HttpResponse
from tether.server.app import AsgiApp

type QueryArg = dict[str, str | list[str]] | None
type HeaderArg = dict[str, str] | None


def _split_target(path: str, query: QueryArg) -> tuple[str, str]:
    route_path, _, query_string = path.partition("?")
    if query:
        encoded = urlencode(query, doseq=True)
        query_string = "&".join(part for part in (query_string, encoded) if part)
    return route_path, query_string


def _encode_headers(headers: HeaderArg, *, json_body: bool) -> list[tuple[bytes, bytes]]:
    encoded = [(b"host", b"testserver")]
    if json_body:
        encoded.append((b"content-type", b"application/json"))
    encoded.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in (headers or {}).items()
    )
    return encoded


def _http_scope(
    method: str, route_path: str, query_string: str, headers: list[tuple[bytes, bytes]]
) -> dict[str, Any]:
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method.upper(),
        "scheme": "http",
        "path": route_path,
        "raw_path": route_path.encode("latin-1"),
        "query_string": query_string.encode("latin-1"),
        "root_path": "",
        "headers": headers,
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 0),
    }


class _Exchange:
    """One request/response exchange: feeds the body in, records what comes out."""

    __slots__ = ("_body", "_delivered", "chunks", "headers", "status")

    def __init__(self, body: bytes) -> None:
        self._body = body
        self._delivered = False
        self.status = 200
        self.headers: list[tuple[str, str]] = []
        self.chunks: list[bytes] = []

    async def receive(self) -> dict[str, Any]:
        if self._delivered:
            return {"type": "http.disconnect"}
        self._delivered = True
        return {"type": "http.request", "body": self._body, "more_body": False}

    async def send(self, message: dict[str, Any]) -> None:
        kind = message["type"]
        if kind == "http.response.start":
            self.status = message["status"]
            self.headers.extend(
                (name.decode("latin-1"), value.decode("latin-1"))
                for name, value in message.get("headers", [])
            )
        elif kind == "http.response.body":
            self.chunks.append(message.get("body", b""))

    def response(self) -> HttpResponse:
        return HttpResponse(
            status=self.status, headers=tuple(self.headers), body=b"".join(self.chunks)
        )


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for tether ASGI apps.

    Usage::

        async with TestClient(app) as client:
            response = await client.get("/api/projects", query={"page": "2"})
            assert response.status == 200
    """

    __slots__ = ("app",)

    def __init__(self, app: AsgiApp) -> None:
        self.app = app

    async def __aenter__(self) -> "TestClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        return None

    async def get(
        self, path: str, *, headers: HeaderArg = None, query: QueryArg = None
    ) -> HttpResponse:
        return await self.request("GET", path, headers=headers, query=query)

    async def delete(
        self, path: str, *, headers: HeaderArg = None, query: QueryArg = None
    ) -> HttpResponse:
        return await self.request("DELETE", path, headers=headers, query=query)

    async def post(self, path: str, **options: Any) -> HttpResponse:
        """Send a POST; accepts the keyword options of ``request``."""
        return await self.request("POST", path, **options)

    async def put(self, path: str, **options: Any) -> HttpResponse:
        return await self.request("PUT", path, **options)

    async def patch(self, path: str, **options: Any) -> HttpResponse:
        return await self.request("PATCH", path, **options)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: HeaderArg = None,
        query: QueryArg = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> HttpResponse:
        """Send an arbitrary request through the ASGI app.

        *json* wins over *body* and adds ``Content-Type: application/json``.
        """
        route_path, query_string = _split_target(path, query)
        payload = body or b""
        if json is not None:
            payload = json_module.dumps(json).encode("utf-8")
        scope = _http_scope(
            method,
            route_path,
            query_string,
            _encode_headers(headers, json_body=json is not None),
        )
        exchange = _Exchange(payload)
        await self.app(scope, exchange.receive, exchange.send)
        return exchange.response()
