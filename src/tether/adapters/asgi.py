"""ASGI adapter: streaming request model.

The body is pulled from ``receive`` only when normalization needs it,
and at most once.
"""

from tether._internal.asgi import Receive, Scope, Send
from tether.adapters.base import IncomingRequest, RuntimeAdapter, normalize
from tether.http.headers import Headers
from tether.http.query import QueryParams
from tether.http.request import CanonicalRequest
from tether.http.response import HttpResponse

ASGI_ADAPTER = RuntimeAdapter(name="asgi", placeholder=("{", "}"))


def _url(scope: Scope, headers: Headers) -> str:
    scheme = scope.get("scheme", "http")
    host = headers.get("host")
    if host is None:
        server = scope.get("server")
        host = f"{server[0]}:{server[1]}" if server else "localhost"
    path = scope.get("root_path", "") + _path(scope)
    query = scope.get("query_string", b"").decode("latin-1")
    return f"{scheme}://{host}{path}" + (f"?{query}" if query else "")


def _path(scope: Scope) -> str:
    # raw_path is still percent-encoded
    raw_path = scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1").split("?", 1)[0]
    return scope["path"]


def incoming_from_asgi(scope: Scope, receive: Receive) -> IncomingRequest:
    headers = Headers.from_raw(scope.get("headers", ()))
    cache: list[bytes] = []

    async def read_body() -> bytes:
        if cache:
            return cache[0]
        chunks: list[bytes] = []
        while True:
            message = await receive()
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break
        cache.append(b"".join(chunks))
        return cache[0]

    return IncomingRequest(
        method=scope["method"].upper(),
        url=_url(scope, headers),
        path=_path(scope),
        headers=headers,
        query=QueryParams.from_string(scope.get("query_string", b"")),
        read_body=read_body,
        raw=scope,
    )


async def normalize_asgi(scope: Scope, receive: Receive) -> CanonicalRequest:
    """ASGI ``scope`` + ``receive`` -> canonical request."""
    return await normalize(incoming_from_asgi(scope, receive), list_headers=ASGI_ADAPTER.list_headers)


async def send_asgi(response: HttpResponse, send: Send) -> None:
    """Write an ``HttpResponse`` through ASGI ``send``."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in response.headers
    ]
    raw_headers.append((b"content-length", str(len(response.body)).encode("latin-1")))
    await send({"type": "http.response.start", "status": response.status, "headers": raw_headers})
    await send({"type": "http.response.body", "body": response.body})

