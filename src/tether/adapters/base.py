"""Shared adapter types and the canonical normalization step."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from tether.http.body import parse_body
from tether.http.headers import Headers
from tether.http.query import QueryParams
from tether.http.request import CanonicalRequest
from tether.routing.paths import normalize_request_path, to_placeholder_syntax

# RFC 3986 pchar delimiters, left as-is when re-encoding a decoded path
_PATH_SAFE = "/:@!$&'()*+,;="


def encode_path(path: str | bytes) -> str:
    """Percent-encode a path that the host already decoded.

    Route matching expects an encoded path, the shape ASGI's
    ``raw_path`` carries. Text is encoded as UTF-8; bytes as given.
    """
    return quote(path, safe=_PATH_SAFE)


async def _no_body() -> bytes:
    return b""


@dataclass(frozen=True, slots=True)
class IncomingRequest:
    """A host request before normalization.

    Middleware sees this shape: headers and query are available, the
    body has not been read yet.
    """

    method: str
    url: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query: QueryParams = field(default_factory=QueryParams)
    read_body: Callable[[], Awaitable[bytes]] = field(default=_no_body, repr=False)
    raw: Any = field(default=None, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class RuntimeAdapter:
    """How one host runtime spells requests, responses and route paths.

    ``list_headers`` keeps repeated headers as lists instead of joining
    them with ``", "``. ``placeholder`` is the host's ``(prefix, suffix)``
    for path parameters.
    """

    name: str
    placeholder: tuple[str, str] = (":", "")
    list_headers: bool = False

    def register_path(self, path: str) -> str:
        prefix, suffix = self.placeholder
        return to_placeholder_syntax(path, prefix, suffix)

    def register_method(self, method: str) -> str:
        return method.lower()


async def normalize(incoming: IncomingRequest, *, list_headers: bool = False) -> CanonicalRequest:
    """Produce the canonical request, reading and parsing the body.

    Raises ``InvalidRequestError`` for a malformed body on a body-carrying method.
    """
    body = await parse_body(
        incoming.method,
        incoming.headers.get("content-type"),
        await _read(incoming),
    )
    return CanonicalRequest(
        method=incoming.method.upper(),
        url=incoming.url,
        path=normalize_request_path(incoming.path),
        headers=incoming.headers.canonical(list_valued=list_headers),
        query=incoming.query.canonical(),
        body=body,
        raw=incoming.raw,
    )


async def _read(incoming: IncomingRequest) -> bytes:
    if incoming.method.upper() in ("GET", "HEAD", "OPTIONS"):
        return b""
    return await incoming.read_body()
