"""MultiValueMapping protocol: shared interface for Headers, QueryParams, FormData.

A structural protocol so adapters and utilities can accept any
multi-valued mapping without coupling to the concrete type.
"""

from collections.abc import Iterator, Mapping
from typing import Protocol, runtime_checkable


@runtime_checkable
class MultiValueMapping(Protocol):
    """A read-only string mapping where keys can have multiple values.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key in first-seen order.
    """

    def __getitem__(self, key: str) -> str: ...
    def __contains__(self, key: object) -> bool: ...
    def __iter__(self) -> Iterator[str]: ...
    def __len__(self) -> int: ...
    def get(self, key: str, default: str | None = None) -> str | None: ...
    def get_list(self, key: str) -> list[str]: ...


def to_canonical(
    mapping: MultiValueMapping,
    *,
    list_valued: bool = True,
    separator: str = ", ",
) -> dict[str, str | list[str]]:
    """Collapse a multi-valued mapping into the canonical dict form.

    A key seen once maps to its string. A repeated key maps to an
    ordered list when *list_valued*, otherwise to the values joined by
    *separator*.
    """
    result: dict[str, str | list[str]] = {}
    for key in mapping:
        values = mapping.get_list(key)
        if len(values) == 1:
            result[key] = values[0]
        elif list_valued:
            result[key] = values
        else:
            result[key] = separator.join(values)
    return result


def flatten_pairs(
    mapping: Mapping[str, str | list[str] | None] | None,
) -> Iterator[tuple[str, str]]:
    """Yield ``(key, value)`` pairs from a dict whose values may be lists.

    ``None`` values are skipped; other scalars are stringified.
    """
    for key, value in (mapping or {}).items():
        if value is None:
            continue
        if isinstance(value, list):
            for item in value:
                yield key, str(item)
        else:
            yield key, str(value)
