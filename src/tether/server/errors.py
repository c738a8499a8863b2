"""Error mapping for dispatched requests.

``map_error`` classifies any exception into a status code and a wire
body. It is pure and total: every exception maps to something, and
nothing but the fixed masked message ever leaves for a 500.

Wire body::

    {"message": str, "errorCode": str, "errorItems": [{"item": str, "message": str}]}

``errorItems`` is only present for validation-class errors that carry
field detail.
"""

import logging
from dataclasses import dataclass
from typing import Any

from tether.errors import (
    AccessDeniedError,
    CodedError,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    ObjectValidationError,
    UnprocessableError,
    UseCaseError,
)
from tether.http.response import HttpResponse, json_response

logger = logging.getLogger("tether.server")

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"
INTERNAL_ERROR_CODE = "INTERNAL_ERROR"

# Most specific first: NotFound/Conflict/Unprocessable before UseCaseError
_STATUS_BY_KIND: tuple[tuple[type[CodedError], int], ...] = (
    (ObjectValidationError, 400),
    (InvalidRequestError, 400),
    (AccessDeniedError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (UnprocessableError, 422),
    (UseCaseError, 400),
)


@dataclass(frozen=True, slots=True)
class MappedError:
    """Status code and JSON-ready wire body for an exception."""

    status: int
    body: dict[str, Any]

    @property
    def masked(self) -> bool:
        return self.status == 500


MASKED = MappedError(
    status=500,
    body={"message": INTERNAL_ERROR_MESSAGE, "errorCode": INTERNAL_ERROR_CODE},
)


def map_error(exc: BaseException) -> MappedError:
    """Classify *exc*. Unknown kinds map to the masked 500."""
    for kind, status in _STATUS_BY_KIND:
        if isinstance(exc, kind):
            body: dict[str, Any] = {"message": exc.message, "errorCode": exc.code}
            items = getattr(exc, "validation_errors", ())
            if items:
                body["errorItems"] = [{"item": e.field, "message": e.message} for e in items]
            return MappedError(status=status, body=body)
    return MASKED


def handle_error(exc: Exception, method: str, path: str, *, debug: bool = False) -> HttpResponse:
    """Map *exc* to a response and log it.

    Masked errors are logged with their traceback; client errors at
    debug level, or info when *debug* is on.
    """
    mapped = map_error(exc)
    if mapped.masked:
        logger.exception("500 %s %s", method, path)
    else:
        logger.log(
            logging.INFO if debug else logging.DEBUG,
            "%d %s %s: %s",
            mapped.status,
            method,
            path,
            mapped.body["message"],
        )
    return json_response(mapped.status, mapped.body)
