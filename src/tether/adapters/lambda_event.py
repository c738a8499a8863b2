"""AWS Lambda adapter: pre-parsed API Gateway events.

Handles HTTP API (payload format 2.0) and REST API (1.0) proxy events.
The body arrives as a string, base64-encoded when ``isBase64Encoded``.

HTTP API v2 already folds repeated headers into one comma-joined value
and moves cookies into a separate ``cookies`` list; both are restored
here so handlers see the same canonical shape as under ASGI.
"""

import base64
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

from tether.adapters.base import IncomingRequest, RuntimeAdapter, encode_path, normalize
from tether.http.headers import Headers
from tether.http.query import QueryParams
from tether.http.request import CanonicalRequest
from tether.http.response import HttpResponse

LAMBDA_ADAPTER = RuntimeAdapter(name="lambda", placeholder=("{", "}"))

_TEXTUAL = ("text/", "application/json", "application/xml", "application/javascript")


def _is_v2(event: Mapping[str, Any]) -> bool:
    return event.get("version") == "2.0" or "rawPath" in event


def _event_body(event: Mapping[str, Any]) -> bytes:
    body = event.get("body")
    if body is None:
        return b""
    if event.get("isBase64Encoded"):
        return base64.b64decode(body)
    return body.encode("utf-8")


def _headers(event: Mapping[str, Any]) -> Headers:
    multi = event.get("multiValueHeaders")
    if multi:
        headers = Headers.from_mapping(multi)
    else:
        headers = Headers.from_mapping(event.get("headers") or {})
    cookies = event.get("cookies")
    if cookies and "cookie" not in headers:
        headers = Headers((*headers.pairs, ("cookie", "; ".join(cookies))))
    return headers


def _query(event: Mapping[str, Any]) -> QueryParams:
    if _is_v2(event):
        return QueryParams.from_string(event.get("rawQueryString", ""))
    multi = event.get("multiValueQueryStringParameters")
    if multi:
        return QueryParams.from_mapping(multi)
    return QueryParams.from_mapping(event.get("queryStringParameters"))


def incoming_from_event(event: Mapping[str, Any]) -> IncomingRequest:
    if _is_v2(event):
        http = event.get("requestContext", {}).get("http", {})
        method = http.get("method", "GET")
        path = event.get("rawPath") or http.get("path", "/")
        raw_query = event.get("rawQueryString", "")
    else:
        method = event.get("httpMethod", "GET")
        # REST API hands over a decoded path; HTTP API's rawPath is not
        path = encode_path(event.get("path", "/"))
        raw_query = ""

    headers = _headers(event)
    query = _query(event)
    if not raw_query and len(query):
        raw_query = urlencode([(k, v) for k in query for v in query.get_list(k)])
    host = headers.get("host") or event.get("requestContext", {}).get("domainName", "localhost")
    scheme = headers.get("x-forwarded-proto", "https")
    url = f"{scheme}://{host}{path}" + (f"?{raw_query}" if raw_query else "")
    body = _event_body(event)

    async def read_body() -> bytes:
        return body

    return IncomingRequest(
        method=method.upper(),
        url=url,
        path=path,
        headers=headers,
        query=query,
        read_body=read_body,
        raw=event,
    )


async def normalize_lambda_event(event: Mapping[str, Any]) -> CanonicalRequest:
    """API Gateway proxy event -> canonical request."""
    return await normalize(incoming_from_event(event), list_headers=LAMBDA_ADAPTER.list_headers)


def to_lambda_result(response: HttpResponse) -> dict[str, Any]:
    """``HttpResponse`` -> API Gateway proxy result dict.

    Textual bodies are returned as UTF-8 strings, everything else base64.
    """
    headers: dict[str, str] = {}
    cookies: list[str] = []
    for name, value in response.headers:
        if name.lower() == "set-cookie":
            cookies.append(value)
        elif name in headers:
            headers[name] = f"{headers[name]}, {value}"
        else:
            headers[name] = value

    content_type = (response.content_type or "").lower()
    textual = not response.body or content_type.startswith(_TEXTUAL)
    result: dict[str, Any] = {
        "statusCode": response.status,
        "headers": headers,
        "body": response.body.decode("utf-8") if textual else base64.b64encode(response.body).decode("ascii"),
        "isBase64Encoded": not textual,
    }
    if cookies:
        result["cookies"] = cookies
    return result
