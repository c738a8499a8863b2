"""Client-side error type.

Every failed client call surfaces as a ``ClientError``. Network and
timeout failures never reached a server, so they use the sentinel
status ``0``.
"""

from collections.abc import Mapping
from typing import Any

from tether.errors import TetherError

NETWORK_ERROR = "NETWORK_ERROR"
TIMEOUT_ERROR = "TIMEOUT_ERROR"
NO_STATUS = 0


class ClientError(TetherError):
    """A failed client call.

    Attributes:
        status: HTTP status, or ``0`` for network and timeout failures.
        code: Machine-readable code from the response body, if any.
        details: The parsed response body (or other detail).
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int,
        code: str | None = None,
        details: Any = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        return f"ClientError({self.message!r}, status={self.status}, code={self.code!r})"

    # -- Factories --

    @classmethod
    def network_error(cls, cause: BaseException) -> "ClientError":
        return cls(
            f"Network error: {cause}" if str(cause) else "Network error",
            status=NO_STATUS,
            code=NETWORK_ERROR,
            cause=cause,
        )

    @classmethod
    def timeout_error(cls, url: str, timeout: float) -> "ClientError":
        return cls(
            f"Request to {url} timed out after {timeout:g}s",
            status=NO_STATUS,
            code=TIMEOUT_ERROR,
            details={"url": url, "timeout": timeout},
        )

    @classmethod
    def from_response(cls, status: int, body: Any) -> "ClientError":
        """Build from a non-success response, reading common error-body shapes."""
        return cls(
            _message_from(body) or f"Request failed with status {status}",
            status=status,
            code=_code_from(body),
            details=body,
        )

    # -- Classification --

    @property
    def is_network_error(self) -> bool:
        return self.status == NO_STATUS

    @property
    def is_timeout(self) -> bool:
        return self.code == TIMEOUT_ERROR

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500

    def should_retry(self) -> bool:
        """Transient failures only: network, timeout, or 5xx. Never 4xx."""
        return self.is_network_error or self.is_server_error

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": type(self).__name__,
            "message": self.message,
            "status": self.status,
            "code": self.code,
            "details": self.details,
        }


def _message_from(body: Any) -> str | None:
    if isinstance(body, str):
        return body or None
    if not isinstance(body, Mapping):
        return None
    for key in ("message", "error", "errorMessage"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    nested = body.get("error")
    if isinstance(nested, Mapping) and isinstance(nested.get("message"), str):
        return nested["message"]
    return None


def _code_from(body: Any) -> str | None:
    if not isinstance(body, Mapping):
        return None
    for key in ("code", "errorCode"):
        value = body.get(key)
        if isinstance(value, str):
            return value
    nested = body.get("error")
    if isinstance(nested, Mapping) and isinstance(nested.get("code"), str):
        return nested["code"]
    return None
