"""Immutable query string parameters.

Implements ``Mapping[str, str]`` and the ``MultiValueMapping`` protocol.
Keys are folded to lowercase, matching the canonical request shape.
"""

from collections.abc import Iterable, Iterator, Mapping
from urllib.parse import parse_qsl

from tether._internal.multimap import flatten_pairs, to_canonical


class QueryParams(Mapping[str, str]):
    """Immutable query string parameters.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key in first-seen order.
    """

    _data: dict[str, list[str]]

    __slots__ = ("_data",)

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        data: dict[str, list[str]] = {}
        for key, value in pairs:
            data.setdefault(key.lower(), []).append(value)
        object.__setattr__(self, "_data", data)

    @classmethod
    def from_string(cls, query_string: str | bytes) -> "QueryParams":
        """Parse a raw query string, keeping blank values."""
        if isinstance(query_string, bytes):
            query_string = query_string.decode("latin-1")
        return cls(parse_qsl(query_string.lstrip("?"), keep_blank_values=True))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str | list[str] | None] | None) -> "QueryParams":
        """Build from a pre-parsed dict (values may be lists)."""
        return cls(flatten_pairs(mapping))

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"QueryParams({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key.lower())
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key.lower(), []))

    def canonical(self) -> dict[str, str | list[str]]:
        """Scalar for keys seen once, ordered list for repeated keys."""
        return to_canonical(self, list_valued=True)
