"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching::

    async def mw(request: IncomingRequest, context: Mapping[str, Any]) -> Mapping[str, Any]

It returns the context entries it contributes; the chain merges them
into the running context. Raising short-circuits the request.
"""

from tether.middleware.chain import assert_middleware_context, run_middleware_chain
from tether.middleware.protocol import Middleware

__all__ = ["Middleware", "assert_middleware_context", "run_middleware_chain"]
