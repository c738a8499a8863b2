"""Method-indexed route table with specificity-ordered regex matching.

Routes are registered during setup and compiled into an immutable,
sorted lookup structure before the first request.
"""

import re
from dataclasses import dataclass
from typing import Any

from tether.errors import NotFoundError
from tether.routing.paths import compile_path, match_and_extract, normalize_request_path
from tether.routing.route import RouteContract, RouteMatch


@dataclass(frozen=True, slots=True)
class _Entry:
    key: str
    route: RouteContract[Any, Any]
    pattern: re.Pattern[str]
    param_names: tuple[str, ...]

    @property
    def sort_key(self) -> tuple[int, int, int]:
        # Fewer placeholders first, then deeper paths, then longer paths
        segments = len([s for s in self.route.path.split("/") if s])
        return (len(self.param_names), -segments, -len(self.route.path))


class RouteTable:
    """Compiled lookup from ``(method, path)`` to a route.

    Usage::

        table = RouteTable()
        table.add("projects.get", define_route("GET", "/projects/{project_id}"))
        table.compile()
        match = table.match("GET", "/projects/p1")
        match.path_params  # {"project_id": "p1"}
    """

    __slots__ = ("_by_method", "_compiled")

    def __init__(self) -> None:
        self._by_method: dict[str, list[_Entry]] = {}
        self._compiled = False

    def add(self, key: str, route: RouteContract[Any, Any]) -> None:
        """Add a route. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        entry = _Entry(
            key=key,
            route=route,
            pattern=compile_path(route.path),
            param_names=route.param_names,
        )
        self._by_method.setdefault(route.method.upper(), []).append(entry)

    def compile(self) -> None:
        """Sort every method bucket by specificity and freeze the table."""
        for entries in self._by_method.values():
            entries.sort(key=lambda e: e.sort_key)
        self._compiled = True

    @property
    def routes(self) -> list[tuple[str, RouteContract[Any, Any]]]:
        """All ``(key, route)`` pairs, grouped by method."""
        return [(e.key, e.route) for entries in self._by_method.values() for e in entries]

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a method and path against the compiled table.

        Raises ``NotFoundError`` (code ``ROUTE_NOT_FOUND``) when nothing matches.
        """
        if not self._compiled:
            self.compile()
        normalized = normalize_request_path(path)
        for entry in self._by_method.get(method.upper(), ()):
            params = match_and_extract(entry.pattern, normalized, entry.param_names)
            if params is not None:
                return RouteMatch(key=entry.key, route=entry.route, path_params=params)
        msg = f"No route matches {method.upper()} {normalized!r}"
        raise NotFoundError(msg, code="ROUTE_NOT_FOUND")
