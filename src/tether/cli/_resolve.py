"""Import resolution: ``"module:attribute"`` strings to route listings.

Accepts a router tree, an ``AsgiApp``/``WsgiApp``, a ``lambda_handler``
result, or a zero-argument factory returning any of those.
"""

import importlib
from collections.abc import Mapping
from typing import Any

from tether.routing.route import RouteContract
from tether.routing.tree import collect_routes


def resolve_target(import_string: str) -> Any:
    """Import ``module:attribute``; the attribute defaults to ``api``.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
    """
    module_path, _, attr_name = import_string.partition(":")
    module = importlib.import_module(module_path)
    return getattr(module, attr_name or "api")


def list_routes(import_string: str) -> list[tuple[str, RouteContract[Any, Any]]]:
    """Resolve *import_string* and return its ``(key, route)`` pairs.

    Raises:
        TypeError: If the target has no routes to list.
    """
    obj = resolve_target(import_string)
    if callable(obj) and not isinstance(obj, Mapping) and not hasattr(obj, "dispatcher"):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(obj, Mapping):
        return list(collect_routes(obj))
    dispatcher = getattr(obj, "dispatcher", None)
    if dispatcher is not None:
        return [(key, route) for key, route in dispatcher.table.routes]
    msg = f"{import_string!r} resolved to {type(obj).__name__}, not a router tree or tether app"
    raise TypeError(msg)
