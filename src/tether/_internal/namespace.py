"""Attribute-access namespaces mirroring a router tree.

The client, the hook generator, the query key factory and the mock
client all expose the tree as ``obj.branch.leaf``. A child whose name
is already a public attribute of the namespace class would be
unreachable by attribute access, so construction rejects it.
"""

from collections.abc import Iterator
from typing import Any

from tether.errors import ConfigurationError


class Namespace:
    """A read-only branch: attribute access to named children."""

    __slots__ = ("_children", "_path")

    def __init__(self, path: str, children: dict[str, Any]) -> None:
        cls = type(self)
        for name in children:
            if hasattr(cls, name):
                where = path or "<root>"
                msg = f"Router key {name!r} under {where!r} clashes with a {cls.__name__} attribute"
                raise ConfigurationError(msg)
        self._path = path
        self._children = children

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._children[name]
        except KeyError:
            where = self._path or "<root>"
            msg = f"{where!r} has no route or namespace {name!r}"
            raise AttributeError(msg) from None

    def __getitem__(self, name: str) -> Any:
        return self._children[name]

    def __dir__(self) -> list[str]:
        return sorted(self._children)

    def __iter__(self) -> Iterator[str]:
        return iter(self._children)

    def __contains__(self, name: object) -> bool:
        return name in self._children

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._path or '<root>'}: {', '.join(self._children)}>"


def resolve(root: Namespace, key: str) -> Any:
    """Resolve a dotted key under *root*. Raises ``KeyError`` if any part is missing."""
    node: Any = root
    for part in key.split("."):
        if not isinstance(node, Namespace) or part not in node:
            raise KeyError(key)
        node = node[part]
    return node
