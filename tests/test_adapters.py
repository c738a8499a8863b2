"""Tests for tether.adapters: every host request model normalizes to the same shape."""

import base64
import io
import json
from typing import Any

import pytest

from tether.adapters import (
    ASGI_ADAPTER,
    LAMBDA_ADAPTER,
    WSGI_ADAPTER,
    IncomingRequest,
    RuntimeAdapter,
    normalize,
    normalize_asgi,
    normalize_lambda_event,
    normalize_wsgi,
)
from tether.adapters.asgi import send_asgi
from tether.adapters.lambda_event import to_lambda_result
from tether.adapters.wsgi import write_wsgi
from tether.errors import InvalidRequestError
from tether.http.headers import Headers
from tether.http.query import QueryParams
from tether.http.response import HttpResponse

BODY = {"title": "Write docs"}


def _asgi(method: str = "POST", body: bytes = b"", chunks: int = 1) -> tuple[dict[str, Any], Any]:
    scope = {
        "type": "http",
        "method": method,
        "scheme": "https",
        "path": "/projects/p1",
        "raw_path": b"/projects/p1",
        "query_string": b"tag=a&Tag=b&page=2",
        "root_path": "",
        "headers": [
            (b"host", b"api.example.com"),
            (b"content-type", b"application/json"),
            (b"x-tag", b"one"),
            (b"x-tag", b"two"),
        ],
    }
    size = max(1, len(body) // chunks) if body else 1
    parts = [body[i : i + size] for i in range(0, len(body), size)] or [b""]
    messages = [
        {"type": "http.request", "body": part, "more_body": i < len(parts) - 1}
        for i, part in enumerate(parts)
    ]
    received: list[dict[str, Any]] = []

    async def receive() -> dict[str, Any]:
        message = messages.pop(0) if messages else {"type": "http.disconnect"}
        received.append(message)
        return message

    receive.received = received  # type: ignore[attr-defined]
    return scope, receive


class TestAsgi:
    async def test_normalize(self) -> None:
        scope, receive = _asgi(body=json.dumps(BODY).encode())
        request = await normalize_asgi(scope, receive)
        assert request.method == "POST"
        assert request.url == "https://api.example.com/projects/p1?tag=a&Tag=b&page=2"
        assert request.path == "/projects/p1"
        assert request.query == {"tag": ["a", "b"], "page": "2"}
        assert request.headers["x-tag"] == "one, two"
        assert request.body == BODY
        assert request.raw is scope

    async def test_chunked_body(self) -> None:
        raw = json.dumps(BODY).encode()
        scope, receive = _asgi(body=raw, chunks=4)
        request = await normalize_asgi(scope, receive)
        assert request.body == BODY

    async def test_get_never_reads_body(self) -> None:
        scope, receive = _asgi(method="GET", body=b"{}")
        request = await normalize_asgi(scope, receive)
        assert request.body is None
        assert receive.received == []

    async def test_malformed_json(self) -> None:
        scope, receive = _asgi(body=b"{nope")
        with pytest.raises(InvalidRequestError):
            await normalize_asgi(scope, receive)

    async def test_send(self) -> None:
        sent: list[dict[str, Any]] = []

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        response = HttpResponse(201, (("content-type", "application/json"),), b"{}")
        await send_asgi(response, send)
        assert sent[0]["status"] == 201
        assert (b"content-length", b"2") in sent[0]["headers"]
        assert sent[1]["body"] == b"{}"


def _v2_event(**overrides: Any) -> dict[str, Any]:
    event = {
        "version": "2.0",
        "rawPath": "/projects/p1",
        "rawQueryString": "tag=a&tag=b&page=2",
        "headers": {"host": "api.example.com", "content-type": "application/json", "x-tag": "one,two"},
        "cookies": ["session=abc", "theme=dark"],
        "requestContext": {"http": {"method": "POST", "path": "/projects/p1"}},
        "body": json.dumps(BODY),
        "isBase64Encoded": False,
    }
    event.update(overrides)
    return event


class TestLambda:
    async def test_http_api_v2(self) -> None:
        request = await normalize_lambda_event(_v2_event())
        assert request.method == "POST"
        assert request.url == "https://api.example.com/projects/p1?tag=a&tag=b&page=2"
        assert request.query == {"tag": ["a", "b"], "page": "2"}
        assert request.headers["cookie"] == "session=abc; theme=dark"
        assert request.body == BODY

    async def test_base64_body(self) -> None:
        encoded = base64.b64encode(json.dumps(BODY).encode()).decode()
        request = await normalize_lambda_event(_v2_event(body=encoded, isBase64Encoded=True))
        assert request.body == BODY

    async def test_rest_api_v1(self) -> None:
        event = {
            "httpMethod": "GET",
            "path": "/projects",
            "multiValueHeaders": {"Host": ["api.example.com"], "X-Tag": ["one", "two"]},
            "multiValueQueryStringParameters": {"tag": ["a", "b"]},
            "body": None,
            "requestContext": {},
        }
        request = await normalize_lambda_event(event)
        assert request.method == "GET"
        assert request.query == {"tag": ["a", "b"]}
        assert request.headers["x-tag"] == "one, two"
        assert request.url == "https://api.example.com/projects?tag=a&tag=b"
        assert request.body is None

    def test_result_json(self) -> None:
        response = HttpResponse(200, (("content-type", "application/json"),), b'{"ok": true}')
        result = to_lambda_result(response)
        assert result == {
            "statusCode": 200,
            "headers": {"content-type": "application/json"},
            "body": '{"ok": true}',
            "isBase64Encoded": False,
        }

    def test_result_binary_and_cookies(self) -> None:
        response = HttpResponse(
            200,
            (
                ("content-type", "application/octet-stream"),
                ("set-cookie", "a=1"),
                ("set-cookie", "b=2"),
            ),
            b"\x00\x01",
        )
        result = to_lambda_result(response)
        assert result["isBase64Encoded"] is True
        assert base64.b64decode(result["body"]) == b"\x00\x01"
        assert result["cookies"] == ["a=1", "b=2"]
        assert "set-cookie" not in result["headers"]


def _environ(body: bytes = b"", method: str = "POST") -> dict[str, Any]:
    return {
        "REQUEST_METHOD": method,
        "PATH_INFO": "/projects/p1",
        "SCRIPT_NAME": "",
        "QUERY_STRING": "tag=a&tag=b",
        "SERVER_NAME": "localhost",
        "SERVER_PORT": "8000",
        "CONTENT_TYPE": "application/json",
        "CONTENT_LENGTH": str(len(body)),
        "HTTP_HOST": "api.example.com",
        "HTTP_X_TRACE_ID": "t-1",
        "wsgi.url_scheme": "http",
        "wsgi.input": io.BytesIO(body),
    }


class TestWsgi:
    async def test_normalize(self) -> None:
        request = await normalize_wsgi(_environ(json.dumps(BODY).encode()))
        assert request.method == "POST"
        assert request.url == "http://api.example.com/projects/p1?tag=a&tag=b"
        assert request.headers["x-trace-id"] == "t-1"
        assert request.headers["content-type"] == "application/json"
        assert request.query == {"tag": ["a", "b"]}
        assert request.body == BODY

    async def test_empty_body(self) -> None:
        request = await normalize_wsgi(_environ())
        assert request.body is None

    def test_write(self) -> None:
        started: list[tuple[str, list[tuple[str, str]]]] = []

        def start_response(status: str, headers: list[tuple[str, str]]) -> None:
            started.append((status, headers))

        body = write_wsgi(HttpResponse(404, (), b"missing"), start_response)
        assert started[0][0] == "404 Not Found"
        assert ("content-length", "7") in started[0][1]
        assert list(body) == [b"missing"]


class TestSameShapeEverywhere:
    async def test_asgi_lambda_wsgi_agree(self) -> None:
        raw = json.dumps(BODY).encode()
        scope, receive = _asgi(body=raw)
        from_asgi = await normalize_asgi(scope, receive)
        from_lambda = await normalize_lambda_event(_v2_event())
        from_wsgi = await normalize_wsgi(_environ(raw))
        for request in (from_lambda, from_wsgi):
            assert request.method == from_asgi.method
            assert request.path == from_asgi.path
            assert request.body == from_asgi.body
            assert request.query["tag"] == ["a", "b"]


class TestRuntimeAdapter:
    def test_placeholder_spelling(self) -> None:
        path = "/projects/{project_id}/tasks/{task_id}"
        assert ASGI_ADAPTER.register_path(path) == path
        assert LAMBDA_ADAPTER.register_path(path) == path
        assert WSGI_ADAPTER.register_path(path) == "/projects/<project_id>/tasks/<task_id>"
        assert RuntimeAdapter("express").register_path(path) == "/projects/:project_id/tasks/:task_id"

    def test_method_lowercased(self) -> None:
        assert ASGI_ADAPTER.register_method("PATCH") == "patch"

    async def test_list_headers(self) -> None:
        incoming = IncomingRequest(
            method="GET",
            url="http://t/x",
            path="/x/",
            headers=Headers([("X-Tag", "a"), ("X-Tag", "b")]),
            query=QueryParams.from_string("q=1"),
        )
        request = await normalize(incoming, list_headers=True)
        assert request.headers == {"x-tag": ["a", "b"]}
        assert request.path == "/x"
        assert request.query == {"q": "1"}
