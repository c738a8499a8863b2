"""Runtime adapters: one strategy per host request model.

Each adapter turns its host's raw request into an ``IncomingRequest``
(cheap: method, URL, headers, query, lazy body) and writes an
``HttpResponse`` back in the host's own form. ``normalize`` finishes
the job and produces the ``CanonicalRequest`` handlers see.

Adapters:
    ASGI_ADAPTER -- streaming ``scope`` + ``receive``
    LAMBDA_ADAPTER -- pre-parsed API Gateway events (HTTP API v2 and REST v1)
    WSGI_ADAPTER -- ``environ`` + ``wsgi.input``
"""

from tether.adapters.asgi import ASGI_ADAPTER, normalize_asgi
from tether.adapters.base import IncomingRequest, RuntimeAdapter, normalize
from tether.adapters.lambda_event import LAMBDA_ADAPTER, normalize_lambda_event
from tether.adapters.wsgi import WSGI_ADAPTER, normalize_wsgi

__all__ = [
    "ASGI_ADAPTER",
    "LAMBDA_ADAPTER",
    "WSGI_ADAPTER",
    "IncomingRequest",
    "RuntimeAdapter",
    "normalize",
    "normalize_asgi",
    "normalize_lambda_event",
    "normalize_wsgi",
]
