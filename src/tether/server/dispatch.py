"""Dispatch pipeline: one request from host runtime to marshaled response.

Order, per request:

1. match the route (``NotFoundError`` with code ``ROUTE_NOT_FOUND``)
2. run app middleware, then route middleware, strictly in declaration order
3. normalize to ``CanonicalRequest`` (malformed bodies fail here)
4. merge the context extractor's output into ``request.context``
5. run validators, then the handler, exactly once
6. check the status code and marshal the response

Every exception is caught at the end and mapped by
``tether.server.errors.handle_error``; nothing escapes unmapped.
"""

import uuid
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from tether._internal.invoke import invoke
from tether.adapters.base import IncomingRequest, normalize
from tether.config import ServerConfig
from tether.errors import ControllerError, InvalidRequestError
from tether.http.request import CanonicalRequest
from tether.http.response import CanonicalResponse, HttpResponse, marshal_response
from tether.middleware.chain import run_middleware_chain
from tether.middleware.protocol import Middleware
from tether.routing.router import RouteTable
from tether.server.errors import handle_error
from tether.server.routes import BoundRoute, validate_request

type ContextExtractor = Callable[[CanonicalRequest], Any]


def default_context() -> dict[str, Any]:
    return {"request_id": f"req_{uuid.uuid4().hex}"}


def to_canonical_response(result: Any, default_status: int = 200) -> CanonicalResponse:
    """Accept a ``CanonicalResponse`` or wrap a bare body in one."""
    if isinstance(result, CanonicalResponse):
        return result
    return CanonicalResponse(status_code=default_status, body=result)


def check_status_code(response: CanonicalResponse) -> None:
    status = response.status_code
    if not isinstance(status, int) or isinstance(status, bool) or not 100 <= status <= 599:
        msg = f"Handler returned invalid status code {status!r}"
        raise ControllerError(msg, code="INVALID_STATUS_CODE")


def check_path_params(path_params: Mapping[str, str]) -> None:
    if any(value == "" for value in path_params.values()):
        raise InvalidRequestError("Path parameters cannot be empty")


class Dispatcher:
    """Routes requests to bound handlers through the pipeline above.

    One dispatcher serves any runtime; hosts only translate their raw
    request into an ``IncomingRequest`` and write back the ``HttpResponse``.
    """

    __slots__ = ("_bound", "_config", "_context_extractor", "_middleware", "_table")

    def __init__(
        self,
        routes: Sequence[BoundRoute],
        *,
        middleware: Sequence[Middleware] = (),
        context_extractor: ContextExtractor | None = None,
        config: ServerConfig | None = None,
    ) -> None:
        self._config = config or ServerConfig()
        self._middleware = tuple(middleware)
        self._context_extractor = context_extractor
        self._bound: dict[str, BoundRoute] = {}
        self._table = RouteTable()
        for bound in routes:
            self._bound[bound.key] = bound
            self._table.add(bound.key, bound.route.with_prefix(self._config.prefix))
        self._table.compile()

    @property
    def config(self) -> ServerConfig:
        return self._config

    @property
    def table(self) -> RouteTable:
        return self._table

    @property
    def routes(self) -> tuple[BoundRoute, ...]:
        return tuple(self._bound.values())

    async def dispatch(self, incoming: IncomingRequest, *, list_headers: bool = False) -> HttpResponse:
        """Run the full pipeline. Always returns a response."""
        try:
            return await self._run(incoming, list_headers=list_headers)
        except Exception as exc:
            return handle_error(exc, incoming.method, incoming.path, debug=self._config.debug)

    async def _run(self, incoming: IncomingRequest, *, list_headers: bool) -> HttpResponse:
        match = self._table.match(incoming.method, incoming.path)
        bound = self._bound[match.key]

        context = await run_middleware_chain((*self._middleware, *bound.middleware), incoming)

        request = await normalize(incoming, list_headers=list_headers)
        check_path_params(match.path_params)
        request = request.with_path_params(match.path_params).with_context(context)

        if self._context_extractor is not None:
            extracted = await invoke(self._context_extractor, request)
            if not isinstance(extracted, Mapping):
                msg = f"Context extractor returned {type(extracted).__name__} instead of a mapping"
                raise ControllerError(msg, code="INVALID_CONTEXT")
            request = request.with_context(extracted)
        if not request.context:
            request = request.with_context(default_context())

        request = await validate_request(request, bound.validators)
        result = await invoke(bound.handler, request)

        response = to_canonical_response(result, bound.status_code)
        check_status_code(response)
        return marshal_response(response)
