"""WSGI adapter: ``environ`` dict with a blocking ``wsgi.input`` stream."""

from collections.abc import Callable, Iterable, Mapping
from http import HTTPStatus
from typing import Any

from tether.adapters.base import IncomingRequest, RuntimeAdapter, encode_path, normalize
from tether.http.headers import Headers
from tether.http.query import QueryParams
from tether.http.request import CanonicalRequest
from tether.http.response import HttpResponse

WSGI_ADAPTER = RuntimeAdapter(name="wsgi", placeholder=("<", ">"))

type StartResponse = Callable[[str, list[tuple[str, str]]], Any]


def _headers(environ: Mapping[str, Any]) -> Headers:
    pairs: list[tuple[str, str]] = []
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            pairs.append((key[5:].replace("_", "-"), value))
        elif key in ("CONTENT_TYPE", "CONTENT_LENGTH") and value:
            pairs.append((key.replace("_", "-"), value))
    return Headers(pairs)


def _script_name(environ: Mapping[str, Any]) -> str:
    return encode_path(environ.get("SCRIPT_NAME", "").encode("latin-1"))


def _path(environ: Mapping[str, Any]) -> str:
    """Encoded request path below ``SCRIPT_NAME``.

    ``PATH_INFO`` is already percent-decoded (and latin-1 text), so an
    encoded ``/`` inside a segment is lost there. The undecoded request
    target is used when the server passes it on.
    """
    raw_uri = environ.get("RAW_URI") or environ.get("REQUEST_URI")
    if raw_uri:
        path = raw_uri.split("?", 1)[0]
        script = _script_name(environ)
        if script and path.startswith(script):
            path = path[len(script) :]
        return path or "/"
    return encode_path(environ.get("PATH_INFO", "").encode("latin-1")) or "/"


def _url(environ: Mapping[str, Any], headers: Headers) -> str:
    scheme = environ.get("wsgi.url_scheme", "http")
    host = headers.get("host") or f"{environ.get('SERVER_NAME', 'localhost')}:{environ.get('SERVER_PORT', '80')}"
    path = _script_name(environ) + _path(environ)
    query = environ.get("QUERY_STRING", "")
    return f"{scheme}://{host}{path}" + (f"?{query}" if query else "")


def incoming_from_environ(environ: Mapping[str, Any]) -> IncomingRequest:
    headers = _headers(environ)

    async def read_body() -> bytes:
        try:
            length = int(environ.get("CONTENT_LENGTH") or 0)
        except ValueError:
            length = 0
        stream = environ.get("wsgi.input")
        if stream is None or length <= 0:
            return b""
        return stream.read(length)

    return IncomingRequest(
        method=environ.get("REQUEST_METHOD", "GET").upper(),
        url=_url(environ, headers),
        path=_path(environ),
        headers=headers,
        query=QueryParams.from_string(environ.get("QUERY_STRING", "")),
        read_body=read_body,
        raw=environ,
    )


async def normalize_wsgi(environ: Mapping[str, Any]) -> CanonicalRequest:
    """WSGI ``environ`` -> canonical request."""
    return await normalize(incoming_from_environ(environ), list_headers=WSGI_ADAPTER.list_headers)


def write_wsgi(response: HttpResponse, start_response: StartResponse) -> Iterable[bytes]:
    """Write an ``HttpResponse`` through ``start_response``."""
    try:
        phrase = HTTPStatus(response.status).phrase
    except ValueError:
        phrase = ""
    headers = [*response.headers, ("content-length", str(len(response.body)))]
    start_response(f"{response.status} {phrase}".rstrip(), headers)
    return [response.body]
