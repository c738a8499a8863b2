"""Immutable, case-insensitive HTTP headers.

Implements ``Mapping[str, str]`` and the ``MultiValueMapping`` protocol.
Names are folded to lowercase on construction; repeated names keep
their values in arrival order.
"""

from collections.abc import Iterable, Iterator, Mapping

from tether._internal.multimap import flatten_pairs, to_canonical


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive HTTP headers.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header.
    """

    __slots__ = ("_pairs",)

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        object.__setattr__(self, "_pairs", tuple((k.lower(), v) for k, v in pairs))

    @classmethod
    def from_raw(cls, raw: Iterable[tuple[bytes, bytes]]) -> "Headers":
        """Build from ASGI-style byte pairs."""
        return cls((k.decode("latin-1"), v.decode("latin-1")) for k, v in raw)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str | list[str] | None]) -> "Headers":
        """Build from a dict whose values may already be lists."""
        return cls(flatten_pairs(mapping))

    def get_list(self, key: str) -> list[str]:
        """Every value sent under *key*, in arrival order."""
        wanted = key.lower()
        return [value for name, value in self._pairs if name == wanted]

    def __getitem__(self, key: str) -> str:
        values = self.get_list(key)
        if not values:
            raise KeyError(key)
        return values[0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and bool(self.get_list(key))

    def __iter__(self) -> Iterator[str]:
        # dict.fromkeys dedupes while keeping first-seen order
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len({name for name, _ in self._pairs})

    def __repr__(self) -> str:
        return f"Headers({self.canonical()!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self.get_list(key)
        return values[0] if values else default

    def canonical(self, *, list_valued: bool = False) -> dict[str, str | list[str]]:
        """Canonical header dict.

        Repeated headers are joined with ``", "`` unless *list_valued*,
        in which case each value is kept individually.
        """
        return to_canonical(self, list_valued=list_valued)

    @property
    def pairs(self) -> tuple[tuple[str, str], ...]:
        return self._pairs
