"""Canonical request: the runtime-independent shape every adapter produces.

Frozen after construction. Context accumulated by middleware and the
context extractor is attached with ``with_context``, which returns a
new request.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from tether.routing.paths import resolve_params

type HeaderMap = dict[str, str | list[str]]
type QueryMap = dict[str, str | list[str]]


@dataclass(frozen=True, slots=True)
class CanonicalRequest:
    """A normalized HTTP request.

    Attributes:
        method: Upper-cased HTTP method.
        url: Full request URL as seen by the host.
        path: Normalized path (leading ``/``, no trailing ``/``, no query).
        headers: Lowercase names; repeated headers joined with ``", "``
            or kept as lists depending on the adapter.
        query: Lowercase keys; scalar for single values, list for repeats.
        path_params: Decoded ``{name}`` values from the matched route.
        body: Parsed body (JSON value, form dict, text, or ``None``).
        context: Values contributed by middleware and the context extractor.
        raw: The host runtime's own request object, untouched.
    """

    method: str
    url: str
    path: str
    headers: HeaderMap = field(default_factory=dict)
    query: QueryMap = field(default_factory=dict)
    path_params: dict[str, str] = field(default_factory=dict)
    body: Any = None
    context: Mapping[str, Any] = field(default_factory=dict)
    raw: Any = field(default=None, repr=False, compare=False)

    def header(self, name: str, default: str | None = None) -> str | None:
        """First value of header *name*, case-insensitive."""
        value = self.headers.get(name.lower())
        if value is None:
            return default
        if isinstance(value, list):
            return value[0] if value else default
        return value

    @property
    def content_type(self) -> str | None:
        return self.header("content-type")

    @property
    def params(self) -> dict[str, Any]:
        """Query and path parameters in one dict; a path value wins a name clash."""
        return resolve_params(self.path_params, self.query)

    def with_context(self, context: Mapping[str, Any]) -> "CanonicalRequest":
        """Return a copy whose context is shallow-merged with *context*."""
        return replace(self, context={**self.context, **context})

    def with_path_params(self, path_params: Mapping[str, str]) -> "CanonicalRequest":
        return replace(self, path_params=dict(path_params))
