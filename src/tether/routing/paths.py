"""Path template engine: ``{name}`` placeholders in route paths.

One template syntax is used everywhere (``/projects/{project_id}``).
Host runtimes that spell placeholders differently get a translated
copy via ``to_placeholder_syntax``; clients fill templates with
``substitute``; servers match concrete paths with ``compile_path`` and
``match_and_extract``.

Substituted values are percent-encoded and extracted values are
percent-decoded, so for every template and assignment::

    concrete = substitute(path, values)
    match_and_extract(compile_path(path), concrete) == values
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import quote, unquote

PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def extract_param_names(path: str) -> list[str]:
    """Return placeholder names in declaration order.

    ``"/p/{project_id}/t/{task_id}"`` -> ``["project_id", "task_id"]``
    """
    return PLACEHOLDER.findall(path)


def to_placeholder_syntax(path: str, prefix: str = ":", suffix: str = "") -> str:
    """Rewrite ``{name}`` placeholders into a host runtime's syntax.

    ``to_placeholder_syntax("/u/{id}")`` -> ``"/u/:id"``;
    ``to_placeholder_syntax("/u/{id}", "<", ">")`` -> ``"/u/<id>"``.
    """
    return PLACEHOLDER.sub(lambda m: f"{prefix}{m.group(1)}{suffix}", path)


def missing_params(path: str, values: Mapping[str, Any] | None) -> list[str]:
    """Placeholder names in *path* with no value. ``None`` and ``""`` count as missing."""
    values = values or {}
    return [name for name in extract_param_names(path) if values.get(name) in (None, "")]


def substitute(path: str, values: Mapping[str, Any] | None) -> str:
    """Replace each ``{name}`` with the percent-encoded ``str(values[name])``.

    Placeholders without a value are left as-is; callers that require
    every value check ``missing_params`` first.
    """
    values = values or {}

    def _replace(m: re.Match[str]) -> str:
        value = values.get(m.group(1))
        if value is None:
            return m.group(0)
        if isinstance(value, bool):
            value = "true" if value else "false"
        return quote(str(value), safe="")

    return PLACEHOLDER.sub(_replace, path)


def compile_path(path: str) -> re.Pattern[str]:
    """Compile a template into an anchored pattern with one named group per placeholder.

    The template gets the same trailing-slash normalization as request
    paths. A placeholder also matches an empty segment (``/p//t``) so the
    caller can reject it rather than report no route.
    """
    path = normalize_request_path(path)
    parts: list[str] = []
    last = 0
    for m in PLACEHOLDER.finditer(path):
        parts.append(re.escape(path[last : m.start()]))
        parts.append(f"(?P<{m.group(1)}>[^/]*)")
        last = m.end()
    parts.append(re.escape(path[last:]))
    return re.compile("^" + "".join(parts) + "$")


def match_and_extract(
    pattern: re.Pattern[str],
    concrete_path: str,
    param_names: Sequence[str] = (),
) -> dict[str, str] | None:
    """Match *concrete_path* and return its decoded parameters, or None.

    Named groups are preferred. Patterns compiled elsewhere with plain
    positional groups are mapped onto *param_names* in order.
    """
    m = pattern.match(concrete_path)
    if m is None:
        return None
    named = m.groupdict()
    if named:
        return {name: unquote(value) for name, value in named.items() if value is not None}
    return {
        name: unquote(value)
        for name, value in zip(param_names, m.groups(), strict=False)
        if value is not None
    }


def normalize_request_path(path: str) -> str:
    """Strip query/fragment, force a leading ``/`` and drop one trailing ``/``."""
    path = path.split("#", 1)[0].split("?", 1)[0]
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    return path


def join_url(base_url: str, path: str) -> str:
    """Join a base URL and a path with exactly one ``/`` between them."""
    if not path.startswith("/"):
        path = "/" + path
    return base_url.rstrip("/") + path


def resolve_params(
    path_params: Mapping[str, str],
    query: Mapping[str, Any],
) -> dict[str, Any]:
    """Merge query and path parameters; a path value always wins."""
    return {**query, **path_params}
