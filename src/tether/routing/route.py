"""RouteContract, RouteDocs and RouteMatch frozen dataclasses."""

from dataclasses import dataclass, field, replace
from typing import Any

from tether.errors import ConfigurationError

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


@dataclass(frozen=True, slots=True)
class RouteDocs:
    """Documentation metadata attached to a route."""

    summary: str | None = None
    description: str | None = None
    tags: tuple[str, ...] = ()
    operation_id: str | None = None
    deprecated: bool = False


@dataclass(frozen=True, slots=True, eq=False)
class RouteContract[RequestT, ResponseT]:
    """An immutable route declaration.

    ``RequestT`` and ``ResponseT`` exist only for static checkers; no
    request or response shape is stored at runtime. Two contracts are
    equal only if they are the same object.

    Usage::

        get_task: RouteContract[None, Task] = define_route(
            "GET", "/api/projects/{project_id}/tasks/{task_id}"
        )
    """

    method: str
    path: str
    docs: RouteDocs = field(default_factory=RouteDocs)

    @property
    def param_names(self) -> tuple[str, ...]:
        from tether.routing.paths import extract_param_names

        return tuple(extract_param_names(self.path))

    def with_prefix(self, prefix: str) -> "RouteContract[RequestT, ResponseT]":
        """Return a copy whose path is ``prefix + path``."""
        if not prefix:
            return self
        return replace(self, path=prefix.rstrip("/") + self.path)

    def with_tags(self, tags: tuple[str, ...]) -> "RouteContract[RequestT, ResponseT]":
        """Return a copy with *tags* appended to its docs."""
        if not tags:
            return self
        merged = self.docs.tags + tuple(t for t in tags if t not in self.docs.tags)
        return replace(self, docs=replace(self.docs, tags=merged))

    def __repr__(self) -> str:
        return f"RouteContract({self.method} {self.path})"


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route table lookup."""

    key: str
    route: RouteContract[Any, Any]
    path_params: dict[str, str]


def define_route(
    method: str,
    path: str,
    *,
    summary: str | None = None,
    description: str | None = None,
    tags: tuple[str, ...] | list[str] = (),
    operation_id: str | None = None,
    deprecated: bool = False,
) -> RouteContract[Any, Any]:
    """Declare a route contract.

    The method is upper-cased. Raises ``ConfigurationError`` for an
    unsupported method or a path without a leading ``/``.
    """
    verb = method.upper()
    if verb not in HTTP_METHODS:
        allowed = ", ".join(sorted(HTTP_METHODS))
        msg = f"Unsupported method {method!r} for {path!r}. Allowed: {allowed}"
        raise ConfigurationError(msg)
    if not path.startswith("/"):
        msg = f"Route path must start with '/': {path!r}"
        raise ConfigurationError(msg)
    docs = RouteDocs(
        summary=summary,
        description=description,
        tags=tuple(tags),
        operation_id=operation_id,
        deprecated=deprecated,
    )
    return RouteContract(method=verb, path=path, docs=docs)
