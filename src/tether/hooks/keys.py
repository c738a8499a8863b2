"""Query key factory.

Keys are tuples derived only from the tree path and the call
parameters, so the same call always yields the same key::

    keys = build_query_keys(api)
    keys.projects()                        # ("projects",)
    keys.projects.get()                    # ("projects", "get")
    keys.projects.get({"path_params": {"project_id": "p1"}})
    # ("projects", "get", {"path_params": {"project_id": "p1"}})

Use the namespace keys to invalidate everything under a branch and the
leaf keys to address one cached query.
"""

import json
from collections.abc import Mapping
from typing import Any

from tether._internal.namespace import Namespace
from tether.routing.route import RouteContract
from tether.routing.tree import RouterTree

type QueryKey = tuple[Any, ...]


def _is_empty(params: Any) -> bool:
    if params is None:
        return True
    if isinstance(params, Mapping):
        return all(_is_empty(v) for v in params.values())
    return False


def _prune(params: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in params.items() if not _is_empty(v)}


class LeafKey:
    """Key factory for one route."""

    __slots__ = ("path",)

    def __init__(self, path: tuple[str, ...]) -> None:
        self.path = path

    def __call__(self, params: Mapping[str, Any] | None = None) -> QueryKey:
        if _is_empty(params):
            return self.path
        return (*self.path, _prune(params))

    def __repr__(self) -> str:
        return f"<LeafKey {'.'.join(self.path)}>"


class NamespaceKey(Namespace):
    """Key factory for a branch. Calling it returns the branch prefix."""

    __slots__ = ("_prefix",)

    def __init__(self, path: tuple[str, ...], children: dict[str, Any]) -> None:
        super().__init__(".".join(path), children)
        self._prefix = path

    def __call__(self) -> QueryKey:
        return self._prefix


def build_query_keys(tree: RouterTree, _path: tuple[str, ...] = ()) -> NamespaceKey:
    children: dict[str, Any] = {}
    for name, child in tree.items():
        here = (*_path, name)
        if isinstance(child, RouteContract):
            children[name] = LeafKey(here)
        else:
            children[name] = build_query_keys(child, here)
    return NamespaceKey(_path, children)


def hash_query_key(key: QueryKey) -> str:
    """Stable string form of a key: JSON with sorted object keys."""
    return json.dumps(list(key), sort_keys=True, separators=(",", ":"), default=str)


def key_matches(prefix: QueryKey, key: QueryKey) -> bool:
    """Whether *key* lies under *prefix* (for branch invalidation)."""
    return len(key) >= len(prefix) and tuple(key[: len(prefix)]) == tuple(prefix)
