"""Sequential context-accumulating middleware chain.

A strict left fold: each middleware receives a snapshot of the context
so far and returns a mapping that is shallow-merged into it. Later
keys overwrite earlier ones. Order is declaration order, always.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from tether._internal.invoke import invoke
from tether.adapters.base import IncomingRequest
from tether.errors import ControllerError
from tether.middleware.protocol import Middleware


def assert_middleware_context(value: object, index: int) -> Mapping[str, Any]:
    """Check a middleware result is a mapping.

    Raises ``ControllerError`` (code ``INVALID_MIDDLEWARE_CONTEXT``) for
    ``None``, lists, tuples, or any other non-mapping value.
    """
    if value is None:
        msg = (
            f"Middleware at index {index} returned None instead of a context mapping. "
            "Return an empty dict to contribute nothing."
        )
        raise ControllerError(msg, code="INVALID_MIDDLEWARE_CONTEXT")
    if not isinstance(value, Mapping):
        msg = (
            f"Middleware at index {index} returned {type(value).__name__} "
            "instead of a context mapping."
        )
        raise ControllerError(msg, code="INVALID_MIDDLEWARE_CONTEXT")
    return value


async def run_middleware_chain(
    middleware: Sequence[Middleware],
    request: IncomingRequest,
    initial: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Run *middleware* in order and return the accumulated context."""
    context: dict[str, Any] = dict(initial or {})
    for index, mw in enumerate(middleware):
        produced = await invoke(mw, request, dict(context))
        context = {**context, **assert_middleware_context(produced, index)}
    return context
