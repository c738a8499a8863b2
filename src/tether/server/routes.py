"""Binding handlers to a router tree.

Usage::

    routes = (
        server_routes(api)
        .handle("projects.list", list_projects)
        .handle("projects.create", create_project, middleware=(require_user,))
        .build()
    )

``build()`` insists every route in the tree has a handler;
``build_partial()`` accepts a subset (for splitting a tree across
deployables).
"""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, replace
from typing import Any, Protocol

from tether._internal.invoke import invoke
from tether.errors import ConfigurationError, FieldError, ObjectValidationError
from tether.http.request import CanonicalRequest
from tether.middleware.protocol import Middleware
from tether.routing.route import RouteContract
from tether.routing.tree import RouterTree, collect_routes

type Handler = Callable[[CanonicalRequest], Any]


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Result of a pluggable validator.

    When ``ok`` and ``value`` is not None, the validated (possibly
    coerced) value replaces the original.
    """

    ok: bool
    value: Any = None
    errors: tuple[FieldError, ...] = ()


class Validator(Protocol):
    def validate(self, value: Any) -> ValidationOutcome | Awaitable[ValidationOutcome]: ...


@dataclass(frozen=True, slots=True)
class RequestValidators:
    """Per-part validators applied before the handler runs."""

    body: Validator | None = None
    query: Validator | None = None
    path_params: Validator | None = None
    headers: Validator | None = None


@dataclass(frozen=True, slots=True)
class BoundRoute:
    """A route contract with its handler and per-route settings."""

    key: str
    route: RouteContract[Any, Any]
    handler: Handler
    middleware: tuple[Middleware, ...] = ()
    validators: RequestValidators | None = None
    status_code: int = 200


class ServerRoutesBuilder:
    """Collects handlers for the routes of one tree."""

    __slots__ = ("_bound", "_routes")

    def __init__(self, tree: RouterTree) -> None:
        self._routes: dict[str, RouteContract[Any, Any]] = dict(collect_routes(tree))
        self._bound: dict[str, BoundRoute] = {}

    def handle(
        self,
        key: str,
        handler: Handler,
        *,
        middleware: Sequence[Middleware] = (),
        validators: RequestValidators | None = None,
        status_code: int = 200,
    ) -> "ServerRoutesBuilder":
        """Bind *handler* to the route at dotted *key*."""
        route = self._routes.get(key)
        if route is None:
            msg = f"Unknown route {key!r}. Known routes: {', '.join(self._routes) or '(none)'}"
            raise ConfigurationError(msg)
        if key in self._bound:
            msg = f"Route {key!r} already has a handler"
            raise ConfigurationError(msg)
        self._bound[key] = BoundRoute(
            key=key,
            route=route,
            handler=handler,
            middleware=tuple(middleware),
            validators=validators,
            status_code=status_code,
        )
        return self

    def build(self) -> tuple[BoundRoute, ...]:
        """Return bound routes in tree order. Every route must be handled."""
        for key in self._routes:
            if key not in self._bound:
                msg = f"Missing handler for route {key!r}"
                raise ConfigurationError(msg)
        return self.build_partial()

    def build_partial(self) -> tuple[BoundRoute, ...]:
        """Return only the routes that have handlers, in tree order."""
        return tuple(self._bound[key] for key in self._routes if key in self._bound)


def server_routes(tree: RouterTree) -> ServerRoutesBuilder:
    return ServerRoutesBuilder(tree)


def use_case_handler(
    request_mapper: Callable[[CanonicalRequest], Any],
    use_case: Callable[[Any], Any],
    response_mapper: Callable[[Any], Any],
) -> Handler:
    """Compose ``request -> input -> output -> response`` into one handler.

    Each stage may be sync or async. The use case may also be an object
    with an ``execute`` method.
    """
    run = getattr(use_case, "execute", use_case)

    async def handler(request: CanonicalRequest) -> Any:
        use_case_input = await invoke(request_mapper, request)
        output = await invoke(run, use_case_input)
        return await invoke(response_mapper, output)

    handler.__name__ = getattr(run, "__name__", "use_case_handler")
    return handler


async def validate_request(
    request: CanonicalRequest,
    validators: RequestValidators | None,
) -> CanonicalRequest:
    """Run the configured validators, collecting every failure.

    Raises ``ObjectValidationError`` with field paths prefixed by the
    request part (``body.title``, ``query.page``).
    """
    if validators is None:
        return request

    errors: list[FieldError] = []
    updates: dict[str, Any] = {}
    parts: tuple[tuple[str, Validator | None, Any], ...] = (
        ("body", validators.body, request.body),
        ("query", validators.query, request.query),
        ("path_params", validators.path_params, request.path_params),
        ("headers", validators.headers, request.headers),
    )
    for part, validator, value in parts:
        if validator is None:
            continue
        outcome: ValidationOutcome = await invoke(validator.validate, value)
        if outcome.ok:
            if outcome.value is not None:
                updates[part] = outcome.value
            continue
        errors.extend(
            FieldError(f"{part}.{e.field}" if e.field else part, e.message) for e in outcome.errors
        )
        if not outcome.errors:
            errors.append(FieldError(part, "Invalid value"))

    if errors:
        raise ObjectValidationError("Request validation failed", errors)
    if not updates:
        return request
    return replace(request, **updates)
