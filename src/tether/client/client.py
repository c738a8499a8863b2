"""Typed client generated from a router tree.

``create_client`` mirrors the tree as nested namespaces whose leaves
are async callables::

    client = create_client(api, ClientConfig(base_url="https://api.example.com"))
    task = await client.projects.tasks.get(
        path_params={"project_id": "p1", "task_id": "t1"},
    )

Each leaf returns the parsed response body. Failures raise ``ClientError``.
"""

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from tether._internal.namespace import Namespace, resolve
from tether.client.cache import CacheStore, make_cache
from tether.client.execute import execute_request
from tether.config import ClientConfig
from tether.routing.route import RouteContract
from tether.routing.tree import RouterTree


class RouteCaller:
    """One callable client method bound to a route contract."""

    __slots__ = ("_owner", "key", "route")

    def __init__(self, key: str, route: RouteContract[Any, Any], owner: "Client") -> None:
        self.key = key
        self.route = route
        self._owner = owner

    def __repr__(self) -> str:
        return f"<RouteCaller {self.key}: {self.route.method} {self.route.path}>"

    async def __call__(
        self,
        *,
        path_params: Mapping[str, Any] | None = None,
        query_params: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        return await execute_request(
            self.route,
            self._owner.config,
            path_params=path_params,
            query_params=query_params,
            body=body,
            headers=headers,
            cache=self._owner.cache,
        )


class ClientNamespace(Namespace):
    """A branch of the client tree."""

    __slots__ = ()


class Client(ClientNamespace):
    """Root of a generated client. Holds the config and the cache."""

    __slots__ = ("_tree", "cache", "config")

    def __init__(self, tree: RouterTree, config: ClientConfig, cache: CacheStore | None) -> None:
        self._tree = tree
        self.config = config
        self.cache = cache
        super().__init__("", _build(tree, "", self))

    def configure(self, **overrides: Any) -> "Client":
        """Return a new client with *overrides* applied to the config.

        ``headers`` are merged with the current headers. The cache is shared.
        """
        if "headers" in overrides:
            overrides["headers"] = {**self.config.headers, **overrides["headers"]}
        return Client(self._tree, replace(self.config, **overrides), self.cache)

    def get(self, key: str) -> RouteCaller:
        """Look up a leaf by dotted key (``"projects.tasks.get"``)."""
        node = resolve(self, key)
        if not isinstance(node, RouteCaller):
            raise KeyError(key)
        return node


def _build(tree: RouterTree, prefix: str, owner: Client) -> dict[str, Any]:
    children: dict[str, Any] = {}
    for name, child in tree.items():
        key = f"{prefix}.{name}" if prefix else name
        if isinstance(child, RouteContract):
            children[name] = RouteCaller(key, child, owner)
        else:
            children[name] = ClientNamespace(key, _build(child, key, owner))
    return children


def create_client(
    tree: RouterTree,
    config: ClientConfig,
    *,
    cache: CacheStore | None = None,
) -> Client:
    """Build a client for *tree*.

    When ``config.cache`` is set and no *cache* is passed, a store is
    created from ``config.cache.storage``.
    """
    if cache is None and config.cache is not None:
        cache = make_cache(config.cache)
    return Client(tree, config, cache)
