"""Canonical handler output and the marshaled wire response.

Handlers return ``CanonicalResponse``; ``marshal_response`` turns it
into an ``HttpResponse`` (status, header pairs, bytes) that each host
runtime writes with its own primitive.

Body policy, applied uniformly by every adapter:

- ``None``: empty payload, no ``Content-Type``.
- ``str``: passed through as ``text/plain; charset=utf-8``.
- ``bytes``: passed through as ``application/octet-stream``.
- anything else: JSON-encoded as ``application/json``.

A ``Content-Type`` set explicitly by the handler always wins.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
BINARY_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class CanonicalResponse:
    """What a handler returns."""

    status_code: int = 200
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """A marshaled response built through immutable transformations.

    Each ``.with_*()`` call returns a new ``HttpResponse``.
    """

    status: int = 200
    headers: tuple[tuple[str, str], ...] = ()
    body: bytes = b""

    def with_status(self, status: int) -> "HttpResponse":
        """Return a new response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> "HttpResponse":
        """Return a new response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> "HttpResponse":
        """Return a new response with additional headers."""
        return replace(self, headers=(*self.headers, *headers.items()))

    def header(self, name: str) -> str | None:
        name = name.lower()
        for key, value in self.headers:
            if key.lower() == name:
                return value
        return None

    @property
    def content_type(self) -> str | None:
        return self.header("content-type")

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> Any:
        return json.loads(self.body)


def body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # 1xx, 204 and 304 never carry a body
    return not (100 <= status < 200 or status in {204, 304})


def encode_body(body: Any) -> tuple[bytes, str | None]:
    """Encode a handler body and pick its default content type."""
    if body is None:
        return b"", None
    if isinstance(body, str):
        return body.encode("utf-8"), TEXT_CONTENT_TYPE
    if isinstance(body, (bytes, bytearray)):
        return bytes(body), BINARY_CONTENT_TYPE
    return json.dumps(body, default=_json_default).encode("utf-8"), JSON_CONTENT_TYPE


def _json_default(value: Any) -> Any:
    from dataclasses import asdict, is_dataclass

    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


def marshal_response(response: CanonicalResponse) -> HttpResponse:
    """Turn handler output into wire form using the body policy above."""
    payload, default_type = encode_body(response.body)
    if not body_allowed(response.status_code):
        payload, default_type = b"", None

    headers = [(name.lower(), str(value)) for name, value in response.headers.items()]
    if default_type is not None and not any(name == "content-type" for name, _ in headers):
        headers.insert(0, ("content-type", default_type))
    return HttpResponse(status=response.status_code, headers=tuple(headers), body=payload)


def json_response(status: int, body: Any) -> HttpResponse:
    """Marshal *body* as JSON regardless of its Python type."""
    payload = json.dumps(body, default=_json_default).encode("utf-8")
    return HttpResponse(status=status, headers=(("content-type", JSON_CONTENT_TYPE),), body=payload)
