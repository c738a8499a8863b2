"""Middleware protocol.

A middleware is any callable matching::

    async def authenticate(request: IncomingRequest, context: Mapping[str, Any]) -> Mapping[str, Any]:
        token = request.headers.get("authorization")
        if token is None:
            raise AccessDeniedError("Missing credentials")
        return {"user_id": await lookup(token)}

Sync functions work too. No base class required; the chain checks the
returned value, not the lineage.
"""

from collections.abc import Awaitable, Mapping
from typing import Any, Protocol

from tether.adapters.base import IncomingRequest

type Context = Mapping[str, Any]


class Middleware(Protocol):
    """Protocol for tether middleware.

    Accepts functions and callable objects::

        class TenantFromHost:
            def __call__(self, request: IncomingRequest, context: Context) -> Context:
                return {"tenant": request.headers.get("host", "").split(".")[0]}
    """

    def __call__(
        self, request: IncomingRequest, context: Context
    ) -> Context | Awaitable[Context]: ...
