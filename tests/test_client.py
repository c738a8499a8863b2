"""Tests for tether.client: generated client over an httpx mock transport."""

import json
from dataclasses import replace
from typing import Any

import anyio
import httpx
import pytest

from tether.client import ClientError, create_client
from tether.client.cache import MemoryCache
from tether.client.execute import ErrorContext, RequestDescriptor, ResponseContext
from tether.config import CacheConfig, ClientConfig, RetryConfig
from tether.errors import ConfigurationError, PathParamError
from tether.routing import define_route, define_router

BASE_URL = "https://api.example.com"

api = define_router(
    {
        "projects": {
            "list": define_route("GET", "/projects"),
            "create": define_route("POST", "/projects"),
            "remove": define_route("DELETE", "/projects/{project_id}"),
            "tasks": {
                "get": define_route("GET", "/projects/{project_id}/tasks/{task_id}"),
            },
        },
    }
)


class Recorder:
    """Mock transport handler that records requests and replays responses."""

    def __init__(self, *responses: httpx.Response | Exception) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item


def _client(recorder: Recorder, **config: Any) -> Any:
    return create_client(
        api, ClientConfig(base_url=BASE_URL, transport=httpx.MockTransport(recorder), **config)
    )


def _ok(body: Any = None, status: int = 200) -> httpx.Response:
    return httpx.Response(status, json=body if body is not None else {})


class TestCalls:
    async def test_path_params_encoded(self) -> None:
        recorder = Recorder(_ok({"id": "t with space"}))
        client = _client(recorder)
        task = await client.projects.tasks.get(
            path_params={"project_id": "p1", "task_id": "t with space"}
        )
        assert task == {"id": "t with space"}
        assert recorder.requests[0].url.raw_path == b"/projects/p1/tasks/t%20with%20space"
        assert recorder.requests[0].method == "GET"

    async def test_query_omits_empty_values(self) -> None:
        recorder = Recorder(_ok([]))
        await _client(recorder).projects.list(
            query_params={"tag": ["a", "b"], "page": 2, "q": None, "sort": ""}
        )
        assert recorder.requests[0].url.query == b"tag=a&tag=b&page=2"

    async def test_post_sends_json(self) -> None:
        recorder = Recorder(_ok({"id": "p1"}, 201))
        created = await _client(recorder).projects.create(body={"name": "Docs"})
        request = recorder.requests[0]
        assert created == {"id": "p1"}
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == {"name": "Docs"}

    async def test_delete_drops_body(self) -> None:
        recorder = Recorder(httpx.Response(204))
        result = await _client(recorder).projects.remove(
            path_params={"project_id": "p1"}, body={"ignored": True}
        )
        assert result == ""
        assert recorder.requests[0].content == b""

    async def test_missing_path_param_fails_before_io(self) -> None:
        recorder = Recorder(_ok())
        with pytest.raises(PathParamError) as exc_info:
            await _client(recorder).projects.tasks.get(path_params={"project_id": "p1"})
        assert exc_info.value.missing == ("task_id",)
        assert recorder.requests == []

    async def test_text_response(self) -> None:
        recorder = Recorder(httpx.Response(200, text="plain"))
        assert await _client(recorder).projects.list() == "plain"

    async def test_headers_merged(self) -> None:
        recorder = Recorder(_ok())
        client = _client(recorder, headers={"Authorization": "Bearer a", "X-App": "web"})
        await client.projects.list(headers={"authorization": "Bearer b"})
        headers = recorder.requests[0].headers
        assert headers["authorization"] == "Bearer b"
        assert headers["x-app"] == "web"

    async def test_get_by_key(self) -> None:
        recorder = Recorder(_ok([]))
        await _client(recorder).get("projects.list")()
        assert recorder.requests[0].url.path == "/projects"

    def test_get_branch_is_key_error(self) -> None:
        with pytest.raises(KeyError):
            _client(Recorder(_ok())).get("projects.tasks")

    def test_unknown_attribute(self) -> None:
        with pytest.raises(AttributeError, match="nope"):
            _client(Recorder(_ok())).projects.nope  # noqa: B018

    def test_reserved_top_level_key(self) -> None:
        tree = define_router({"config": define_route("GET", "/config")})
        with pytest.raises(ConfigurationError, match="clashes"):
            create_client(tree, ClientConfig(base_url=BASE_URL))

    async def test_nested_key_named_like_a_namespace_helper(self) -> None:
        tree = define_router({"users": {"lookup": define_route("GET", "/users/{user_id}")}})
        recorder = Recorder(_ok({"id": "u1"}))
        client = create_client(
            tree, ClientConfig(base_url=BASE_URL, transport=httpx.MockTransport(recorder))
        )
        assert await client.users.lookup(path_params={"user_id": "u1"}) == {"id": "u1"}
        assert recorder.requests[0].url.path == "/users/u1"
        assert client.get("users.lookup") is client.users.lookup

    async def test_empty_path_param_fails_before_io(self) -> None:
        recorder = Recorder(_ok())
        with pytest.raises(PathParamError) as exc_info:
            await _client(recorder).projects.remove(path_params={"project_id": ""})
        assert exc_info.value.missing == ("project_id",)
        assert recorder.requests == []


class TestFailures:
    async def test_not_found(self) -> None:
        recorder = Recorder(_ok({"message": "Project missing", "errorCode": "NOT_FOUND"}, 404))
        with pytest.raises(ClientError) as exc_info:
            await _client(recorder).projects.remove(path_params={"project_id": "p1"})
        error = exc_info.value
        assert error.status == 404
        assert error.code == "NOT_FOUND"
        assert error.message == "Project missing"
        assert error.is_client_error
        assert not error.should_retry()
        assert error.to_dict() == {
            "name": "ClientError",
            "message": "Project missing",
            "status": 404,
            "code": "NOT_FOUND",
            "details": {"message": "Project missing", "errorCode": "NOT_FOUND"},
        }

    async def test_message_fallback(self) -> None:
        recorder = Recorder(httpx.Response(500))
        with pytest.raises(ClientError) as exc_info:
            await _client(recorder).projects.list()
        assert exc_info.value.message == "Request failed with status 500"
        assert exc_info.value.is_server_error

    async def test_network_error(self) -> None:
        recorder = Recorder(httpx.ConnectError("connection refused"))
        with pytest.raises(ClientError) as exc_info:
            await _client(recorder).projects.list()
        assert exc_info.value.status == 0
        assert exc_info.value.is_network_error
        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    async def test_timeout(self) -> None:
        async def slow(request: httpx.Request) -> httpx.Response:
            await anyio.sleep(1)
            return httpx.Response(200)

        client = create_client(
            api,
            ClientConfig(base_url=BASE_URL, timeout=0.05, transport=httpx.MockTransport(slow)),
        )
        with pytest.raises(ClientError) as exc_info:
            await client.projects.list()
        assert exc_info.value.is_timeout
        assert exc_info.value.status == 0


class TestRetry:
    async def test_retries_server_errors(self) -> None:
        recorder = Recorder(httpx.Response(503), httpx.Response(503), _ok({"ok": True}))
        client = _client(recorder, retry=RetryConfig(attempts=3, delay=0))
        assert await client.projects.list() == {"ok": True}
        assert len(recorder.requests) == 3

    async def test_gives_up_after_attempts(self) -> None:
        recorder = Recorder(httpx.Response(500))
        client = _client(recorder, retry=RetryConfig(attempts=3, delay=0))
        with pytest.raises(ClientError) as exc_info:
            await client.projects.list()
        assert exc_info.value.status == 500
        assert len(recorder.requests) == 3

    async def test_client_errors_not_retried(self) -> None:
        recorder = Recorder(httpx.Response(400))
        client = _client(recorder, retry=RetryConfig(attempts=3, delay=0))
        with pytest.raises(ClientError):
            await client.projects.list()
        assert len(recorder.requests) == 1


class TestHooks:
    async def test_on_request_rewrites(self) -> None:
        def sign(descriptor: RequestDescriptor) -> RequestDescriptor:
            return replace(descriptor, headers={**descriptor.headers, "x-signature": "sig"})

        recorder = Recorder(_ok())
        await _client(recorder, on_request=sign).projects.list()
        assert recorder.requests[0].headers["x-signature"] == "sig"

    async def test_on_response_transforms(self) -> None:
        seen: list[ResponseContext] = []

        async def unwrap(body: Any, context: ResponseContext) -> Any:
            seen.append(context)
            return body["data"]

        recorder = Recorder(_ok({"data": [1, 2]}))
        assert await _client(recorder, on_response=unwrap).projects.list() == [1, 2]
        assert seen[0].status == 200
        assert seen[0].method == "GET"

    async def test_on_error_called_once_with_final_attempt(self) -> None:
        errors: list[tuple[ClientError, ErrorContext]] = []

        def record(error: ClientError, context: ErrorContext) -> None:
            errors.append((error, context))

        recorder = Recorder(httpx.Response(502))
        client = _client(recorder, retry=RetryConfig(attempts=2, delay=0), on_error=record)
        with pytest.raises(ClientError):
            await client.projects.list()
        assert len(errors) == 1
        assert errors[0][1].attempt == 2
        assert errors[0][0].status == 502


class TestCache:
    async def test_get_cached(self) -> None:
        recorder = Recorder(_ok([{"id": "p1"}]))
        client = _client(recorder, cache=CacheConfig(ttl=60))
        first = await client.projects.list()
        second = await client.projects.list()
        assert first == second == [{"id": "p1"}]
        assert len(recorder.requests) == 1

    async def test_distinct_urls_cached_separately(self) -> None:
        recorder = Recorder(_ok([]))
        client = _client(recorder, cache=CacheConfig(ttl=60))
        await client.projects.list(query_params={"page": 1})
        await client.projects.list(query_params={"page": 2})
        assert len(recorder.requests) == 2

    async def test_post_never_cached(self) -> None:
        recorder = Recorder(_ok({"id": "p1"}))
        client = _client(recorder, cache=CacheConfig(ttl=60))
        await client.projects.create(body={})
        await client.projects.create(body={})
        assert len(recorder.requests) == 2

    async def test_explicit_store_shared_by_configure(self) -> None:
        recorder = Recorder(_ok([]))
        store = MemoryCache()
        client = create_client(
            api,
            ClientConfig(base_url=BASE_URL, cache=CacheConfig(), transport=httpx.MockTransport(recorder)),
            cache=store,
        )
        await client.projects.list()
        await client.configure(headers={"x-extra": "1"}).projects.list()
        assert len(recorder.requests) == 1
        assert len(store) == 1


class TestCredentials:
    @pytest.mark.parametrize(
        ("policy", "sent"),
        [("omit", False), ("same-origin", True), ("include", True)],
    )
    async def test_cookie_policy(self, policy: str, sent: bool) -> None:
        recorder = Recorder(_ok())
        client = _client(recorder, credentials=policy, headers={"Cookie": "session=abc"})
        await client.projects.list()
        assert ("cookie" in recorder.requests[0].headers) is sent


class TestConfigure:
    async def test_headers_merge(self) -> None:
        recorder = Recorder(_ok())
        client = _client(recorder, headers={"x-app": "web"})
        derived = client.configure(headers={"x-tenant": "acme"}, timeout=5.0)
        await derived.projects.list()
        headers = recorder.requests[0].headers
        assert headers["x-app"] == "web"
        assert headers["x-tenant"] == "acme"
        assert derived.config.timeout == 5.0
        assert client.config.timeout == 30.0
