"""Tether exception hierarchy.

Server-side errors shared by routing, normalization, middleware and
handlers. Every ``CodedError`` carries a stable machine-readable code;
``tether.server.errors.map_error`` turns any exception into a status
code and a wire body.

Client-side failures live in ``tether.client.errors`` and are never
mixed with these.
"""

from collections.abc import Sequence
from dataclasses import dataclass


class TetherError(Exception):
    """Base for all tether-specific errors."""


class ConfigurationError(TetherError):
    """Raised when a route, router tree, or config is invalid.

    Typically raised at construction time, before any request is served.
    """


class PathParamError(TetherError, ValueError):
    """Raised when a path template is filled without a required value."""

    def __init__(self, path: str, missing: Sequence[str]) -> None:
        self.path = path
        self.missing = tuple(missing)
        names = ", ".join(self.missing)
        super().__init__(f"Missing path parameters for {path!r}: {names}")


@dataclass(frozen=True, slots=True)
class FieldError:
    """A single per-field validation failure."""

    field: str
    message: str


class CodedError(TetherError):
    """An application error with a stable ``code``.

    Subclasses pick the default code; callers may override it.
    """

    default_code = "ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r})"


class _FieldErrorsMixin:
    validation_errors: tuple[FieldError, ...]

    def _set_errors(self, errors: Sequence[FieldError] | None) -> None:
        self.validation_errors = tuple(errors or ())


class ObjectValidationError(_FieldErrorsMixin, CodedError):
    """400: a validated object failed its schema."""

    default_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str = "Validation failed",
        validation_errors: Sequence[FieldError] | None = None,
        *,
        code: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, code=code, cause=cause)
        self._set_errors(validation_errors)


class InvalidRequestError(_FieldErrorsMixin, CodedError):
    """400: the request itself is malformed (bad body, empty path param)."""

    default_code = "INVALID_REQUEST"

    def __init__(
        self,
        message: str = "Invalid request",
        validation_errors: Sequence[FieldError] | None = None,
        *,
        code: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, code=code, cause=cause)
        self._set_errors(validation_errors)


class AccessDeniedError(CodedError):
    """403: the caller is not allowed to do this."""

    default_code = "ACCESS_DENIED"


class UseCaseError(CodedError):
    """400: an explicitly raised application-layer error."""

    default_code = "USE_CASE_ERROR"


class NotFoundError(UseCaseError):
    """404: the addressed resource does not exist."""

    default_code = "NOT_FOUND"


class ConflictError(UseCaseError):
    """409: the request conflicts with current state."""

    default_code = "CONFLICT"


class UnprocessableError(UseCaseError):
    """422: a business rule rejected an otherwise valid request."""

    default_code = "UNPROCESSABLE"


class DomainError(CodedError):
    """Domain-layer invariant violation. Always masked as 500."""

    default_code = "DOMAIN_ERROR"


class InfraError(CodedError):
    """Infrastructure failure (database, network, disk). Always masked as 500."""

    default_code = "INFRA_ERROR"


class ControllerError(CodedError):
    """Presentation-layer bug, e.g. a handler returned a bad status. Masked as 500."""

    default_code = "CONTROLLER_ERROR"
