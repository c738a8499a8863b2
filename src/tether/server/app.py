"""Host applications: bind a dispatcher to a concrete runtime.

``AsgiApp`` and ``WsgiApp`` are callables the respective servers mount;
``lambda_handler`` builds an AWS Lambda entry point. All three share
one ``Dispatcher`` and differ only in how they read and write.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import anyio

from tether._internal.asgi import Receive, Scope, Send
from tether.adapters.asgi import ASGI_ADAPTER, incoming_from_asgi, send_asgi
from tether.adapters.base import RuntimeAdapter
from tether.adapters.lambda_event import LAMBDA_ADAPTER, incoming_from_event, to_lambda_result
from tether.adapters.wsgi import WSGI_ADAPTER, StartResponse, incoming_from_environ, write_wsgi
from tether.config import ServerConfig
from tether.middleware.protocol import Middleware
from tether.server.dispatch import ContextExtractor, Dispatcher
from tether.server.routes import BoundRoute

logger = logging.getLogger("tether.server")


def registrations(
    dispatcher: Dispatcher,
    adapter: RuntimeAdapter,
) -> list[tuple[str, str, str]]:
    """``(method, path, key)`` triples in the host's own spelling.

    Methods are lower-cased and ``{name}`` placeholders are rewritten to
    the adapter's syntax, ready to feed a host router.
    """
    return [
        (adapter.register_method(route.method), adapter.register_path(route.path), key)
        for key, route in dispatcher.table.routes
    ]


class AsgiApp:
    """ASGI 3 application serving a set of bound routes.

    Usage::

        app = AsgiApp(server_routes(api).handle(...).build(), middleware=[authenticate])
        # uvicorn mymodule:app
    """

    __slots__ = ("dispatcher",)

    def __init__(
        self,
        routes: Sequence[BoundRoute],
        *,
        middleware: Sequence[Middleware] = (),
        context_extractor: ContextExtractor | None = None,
        config: ServerConfig | None = None,
    ) -> None:
        self.dispatcher = Dispatcher(
            routes,
            middleware=middleware,
            context_extractor=context_extractor,
            config=config,
        )

    @property
    def registrations(self) -> list[tuple[str, str, str]]:
        return registrations(self.dispatcher, ASGI_ADAPTER)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        if scope["type"] != "http":
            return
        incoming = incoming_from_asgi(scope, receive)
        response = await self.dispatcher.dispatch(incoming, list_headers=ASGI_ADAPTER.list_headers)
        await send_asgi(response, send)

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                logger.debug("ASGI startup with %d routes", len(self.dispatcher.routes))
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return


class WsgiApp:
    """WSGI application serving a set of bound routes.

    Each request runs the async pipeline to completion with ``anyio.run``.
    """

    __slots__ = ("dispatcher",)

    def __init__(
        self,
        routes: Sequence[BoundRoute],
        *,
        middleware: Sequence[Middleware] = (),
        context_extractor: ContextExtractor | None = None,
        config: ServerConfig | None = None,
    ) -> None:
        self.dispatcher = Dispatcher(
            routes,
            middleware=middleware,
            context_extractor=context_extractor,
            config=config,
        )

    @property
    def registrations(self) -> list[tuple[str, str, str]]:
        return registrations(self.dispatcher, WSGI_ADAPTER)

    def __call__(self, environ: Mapping[str, Any], start_response: StartResponse) -> list[bytes]:
        incoming = incoming_from_environ(environ)

        async def run() -> Any:
            return await self.dispatcher.dispatch(incoming, list_headers=WSGI_ADAPTER.list_headers)

        response = anyio.run(run)
        return list(write_wsgi(response, start_response))


def lambda_handler(
    routes: Sequence[BoundRoute],
    *,
    middleware: Sequence[Middleware] = (),
    context_extractor: ContextExtractor | None = None,
    config: ServerConfig | None = None,
) -> Callable[[Mapping[str, Any], Any], dict[str, Any]]:
    """Build an AWS Lambda handler for API Gateway proxy events.

    Usage::

        handler = lambda_handler(server_routes(api).handle(...).build())
    """
    dispatcher = Dispatcher(
        routes,
        middleware=middleware,
        context_extractor=context_extractor,
        config=config,
    )

    def handler(event: Mapping[str, Any], context: Any = None) -> dict[str, Any]:
        incoming = incoming_from_event(event)

        async def run() -> Any:
            return await dispatcher.dispatch(incoming, list_headers=LAMBDA_ADAPTER.list_headers)

        return to_lambda_result(anyio.run(run))

    handler.dispatcher = dispatcher  # type: ignore[attr-defined]
    return handler
