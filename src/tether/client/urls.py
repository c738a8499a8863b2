"""URL building for client calls."""

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, urlencode

from tether.errors import PathParamError
from tether.routing.paths import join_url, missing_params, substitute


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_query(query: Mapping[str, Any] | None) -> str:
    """Encode query params, skipping ``None`` and ``""``.

    List values become repeated keys; ``None``/``""`` items inside a
    list are skipped as well.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in (query or {}).items():
        if value is None or value == "":
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _query_value(v)) for v in value if v is not None and v != "")
        else:
            pairs.append((key, _query_value(value)))
    return urlencode(pairs, quote_via=quote)


def build_url(
    base_url: str,
    path: str,
    path_params: Mapping[str, Any] | None = None,
    query_params: Mapping[str, Any] | None = None,
) -> str:
    """Fill *path*, join it to *base_url* and append the query string.

    ``build_url("https://x/api/", "/tasks/{id}", {"id": "a b"}, {"q": None})``
    -> ``"https://x/api/tasks/a%20b"``

    Raises:
        PathParamError: If any placeholder has no value.
    """
    missing = missing_params(path, path_params)
    if missing:
        raise PathParamError(path, missing)
    url = join_url(base_url, substitute(path, path_params))
    query = encode_query(query_params)
    return f"{url}?{query}" if query else url
