"""Query and mutation hooks generated from a router tree and its client.

Python has no component framework to bind to, so a hook returns the
options a caching layer needs rather than rendering anything::

    hooks = create_hooks(api, client)
    options = hooks.hooks.projects.get.use_query({"path_params": {"project_id": "p1"}})
    options.query_key   # ("projects", "get", {"path_params": {"project_id": "p1"}})
    data = await options.query_fn()

GET routes get a ``QueryHook``; every other method a ``MutationHook``
with no implicit cache key.
"""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tether._internal.namespace import Namespace
from tether.client.client import Client, RouteCaller
from tether.hooks.keys import LeafKey, NamespaceKey, QueryKey, build_query_keys
from tether.routing.route import RouteContract
from tether.routing.tree import RouterTree

QUERY_METHODS = frozenset({"GET", "HEAD"})
_PARAM_NAMES = ("path_params", "query_params", "body", "headers")


@dataclass(frozen=True, slots=True)
class QueryOptions:
    query_key: QueryKey
    query_fn: Callable[[], Awaitable[Any]]
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class MutationOptions:
    mutation_fn: Callable[[Mapping[str, Any] | None], Awaitable[Any]]
    options: Mapping[str, Any] = field(default_factory=dict)


def _call_kwargs(params: Mapping[str, Any] | None) -> dict[str, Any]:
    params = params or {}
    unknown = set(params) - set(_PARAM_NAMES)
    if unknown:
        msg = f"Unknown call parameters: {', '.join(sorted(unknown))}"
        raise TypeError(msg)
    return {name: params[name] for name in _PARAM_NAMES if name in params}


class QueryHook:
    """Read hook for a GET route."""

    __slots__ = ("caller", "key")

    def __init__(self, caller: RouteCaller, key: LeafKey) -> None:
        self.caller = caller
        self.key = key

    def use_query(self, params: Mapping[str, Any] | None = None, **options: Any) -> QueryOptions:
        kwargs = _call_kwargs(params)

        async def query_fn() -> Any:
            return await self.caller(**kwargs)

        return QueryOptions(query_key=self.key(params), query_fn=query_fn, options=options)

    async def fetch(self, params: Mapping[str, Any] | None = None) -> Any:
        return await self.caller(**_call_kwargs(params))


class MutationHook:
    """Write hook for a POST, PUT, PATCH or DELETE route."""

    __slots__ = ("caller",)

    def __init__(self, caller: RouteCaller) -> None:
        self.caller = caller

    def use_mutation(self, **options: Any) -> MutationOptions:
        async def mutation_fn(params: Mapping[str, Any] | None = None) -> Any:
            return await self.caller(**_call_kwargs(params))

        return MutationOptions(mutation_fn=mutation_fn, options=options)

    async def mutate(self, params: Mapping[str, Any] | None = None) -> Any:
        return await self.caller(**_call_kwargs(params))


@dataclass(frozen=True, slots=True)
class HooksResult:
    hooks: Namespace
    query_keys: NamespaceKey


def create_hooks(tree: RouterTree, client: Client) -> HooksResult:
    """Wrap every client leaf of *tree* in a query or mutation hook."""
    keys = build_query_keys(tree)
    return HooksResult(hooks=_build(tree, client, keys, ""), query_keys=keys)


def _build(tree: RouterTree, client: Client, keys: NamespaceKey, prefix: str) -> Namespace:
    children: dict[str, Any] = {}
    for name, child in tree.items():
        key = f"{prefix}.{name}" if prefix else name
        if isinstance(child, RouteContract):
            caller = client.get(key)
            if child.method in QUERY_METHODS:
                children[name] = QueryHook(caller, keys[name])
            else:
                children[name] = MutationHook(caller)
        else:
            children[name] = _build(child, client, keys[name], key)
    return Namespace(prefix, children)
