"""Router trees: named, arbitrarily nested collections of route contracts.

A tree is a read-only mapping whose values are either ``RouteContract``
leaves or nested trees. Dotted keys (``"projects.tasks.get"``) address
leaves and are shared by the server builder, the client, and the hook
generator.

Usage::

    api = define_router(
        {
            "projects": {
                "list": define_route("GET", "/projects"),
                "tasks": {"get": define_route("GET", "/projects/{project_id}/tasks/{task_id}")},
            },
        },
        base_path="/api",
    )
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from tether.errors import ConfigurationError
from tether.routing.route import RouteContract

type RouterNode = RouteContract[Any, Any] | Mapping[str, RouterNode]
type RouterTree = Mapping[str, RouterNode]


def is_route(obj: object) -> bool:
    return isinstance(obj, RouteContract)


def is_router(obj: object) -> bool:
    return isinstance(obj, Mapping)


def define_router(
    routes: Mapping[str, Any],
    *,
    base_path: str | None = None,
    tags: tuple[str, ...] | list[str] = (),
) -> RouterTree:
    """Validate and deep-freeze a nested mapping of route contracts.

    ``base_path`` is prefixed to every path and ``tags`` are appended to
    every route's docs.

    Raises:
        ConfigurationError: On a non-route leaf, a self-containing
            mapping, a non-string key, or two routes sharing the same
            method and path.
    """
    if base_path is not None and not base_path.startswith("/"):
        msg = f"base_path must start with '/': {base_path!r}"
        raise ConfigurationError(msg)
    frozen = _freeze(routes, base_path or "", tuple(tags), (), set())
    _check_unique(frozen)
    return frozen


def _freeze(
    node: Mapping[str, Any],
    prefix: str,
    tags: tuple[str, ...],
    trail: tuple[str, ...],
    active: set[int],
) -> RouterTree:
    if id(node) in active:
        where = ".".join(trail) or "<root>"
        msg = f"Router tree contains itself at {where!r}"
        raise ConfigurationError(msg)
    active.add(id(node))
    try:
        frozen: dict[str, RouterNode] = {}
        for name, child in node.items():
            if not isinstance(name, str) or not name:
                msg = f"Router keys must be non-empty strings, got {name!r}"
                raise ConfigurationError(msg)
            if "." in name:
                msg = f"Router key {name!r} must not contain '.'"
                raise ConfigurationError(msg)
            here = (*trail, name)
            if isinstance(child, RouteContract):
                frozen[name] = child.with_prefix(prefix).with_tags(tags)
            elif isinstance(child, Mapping):
                frozen[name] = _freeze(child, prefix, tags, here, active)
            else:
                msg = (
                    f"Router entry {'.'.join(here)!r} is {type(child).__name__}, "
                    "expected a RouteContract or a nested mapping"
                )
                raise ConfigurationError(msg)
    finally:
        active.discard(id(node))
    return MappingProxyType(frozen)


def _check_unique(tree: RouterTree) -> None:
    seen: dict[tuple[str, str], str] = {}
    for key, route in collect_routes(tree):
        signature = (route.method, route.path)
        if signature in seen:
            msg = (
                f"Routes {seen[signature]!r} and {key!r} both declare "
                f"{route.method} {route.path}"
            )
            raise ConfigurationError(msg)
        seen[signature] = key


def collect_routes(
    tree: RouterTree,
    prefix: str = "",
) -> Iterator[tuple[str, RouteContract[Any, Any]]]:
    """Yield ``(dotted_key, route)`` pairs in declaration order."""
    for name, child in tree.items():
        key = f"{prefix}.{name}" if prefix else name
        if isinstance(child, RouteContract):
            yield key, child
        else:
            yield from collect_routes(child, key)


def get_route(tree: RouterTree, key: str) -> RouteContract[Any, Any]:
    """Look up a leaf by dotted key. Raises ``KeyError`` if absent."""
    node: RouterNode = tree
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            raise KeyError(key)
        node = node[part]
    if not isinstance(node, RouteContract):
        raise KeyError(key)
    return node


def merge_routers(*trees: RouterTree) -> RouterTree:
    """Merge trees at the top level. Duplicate keys raise ``ConfigurationError``."""
    merged: dict[str, RouterNode] = {}
    for tree in trees:
        for name, child in tree.items():
            if name in merged:
                msg = f"Duplicate router key {name!r} while merging"
                raise ConfigurationError(msg)
            merged[name] = child
    return define_router(merged)
