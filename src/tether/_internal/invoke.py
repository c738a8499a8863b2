"""Invoke helpers: call sync or async callables uniformly.

Handlers, middleware, validators and client hooks can all be ``def`` or
``async def``. The sync/async check lives here and nowhere else.

Usage::

    from tether._internal.invoke import invoke

    result = await invoke(handler, *args, **kwargs)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
