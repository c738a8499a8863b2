"""Server and client configuration.

Every config is a frozen dataclass: immutable after creation,
IDE-autocompletable, no string-key dict lookups. Durations are seconds.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from tether.errors import ConfigurationError

if TYPE_CHECKING:
    import httpx

    from tether.client.errors import ClientError

type Backoff = Literal["linear", "exponential"]
type Storage = Literal["memory", "persistent"]
type Credentials = Literal["omit", "same-origin", "include"]

_CREDENTIALS = ("omit", "same-origin", "include")


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Dispatch-side configuration.

    ``prefix`` is prepended to every registered path. ``debug`` only
    affects logging verbosity; internal error detail is never sent to
    the caller.
    """

    prefix: str = ""
    debug: bool = False

    def __post_init__(self) -> None:
        if self.prefix and not self.prefix.startswith("/"):
            msg = f"ServerConfig.prefix must start with '/': {self.prefix!r}"
            raise ConfigurationError(msg)


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """Retry policy for client calls.

    ``attempts`` is the total number of tries, including the first.
    ``retry_on`` overrides the default "5xx, network or timeout" rule.
    """

    attempts: int = 3
    delay: float = 1.0
    backoff: Backoff = "exponential"
    retry_on: Callable[["ClientError", int], bool] | None = None

    def __post_init__(self) -> None:
        if self.attempts < 1:
            msg = f"RetryConfig.attempts must be >= 1, got {self.attempts}"
            raise ConfigurationError(msg)
        if self.delay < 0:
            msg = f"RetryConfig.delay must be >= 0, got {self.delay}"
            raise ConfigurationError(msg)
        if self.backoff not in ("linear", "exponential"):
            msg = f"Unknown backoff {self.backoff!r}; expected 'linear' or 'exponential'"
            raise ConfigurationError(msg)


@dataclass(frozen=True, slots=True)
class CacheConfig:
    """GET response caching.

    ``storage="persistent"`` keeps entries in an SQLite file at ``path``
    (defaults to ``.tether-cache.sqlite3`` in the working directory).
    """

    ttl: float = 60.0
    storage: Storage = "memory"
    path: str | Path | None = None

    def __post_init__(self) -> None:
        if self.ttl <= 0:
            msg = f"CacheConfig.ttl must be > 0, got {self.ttl}"
            raise ConfigurationError(msg)
        if self.storage not in ("memory", "persistent"):
            msg = f"Unknown cache storage {self.storage!r}; expected 'memory' or 'persistent'"
            raise ConfigurationError(msg)


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Client configuration. Immutable after creation::

        config = ClientConfig(
            base_url="https://api.example.com",
            retry=RetryConfig(attempts=5, backoff="linear"),
            cache=CacheConfig(ttl=30),
        )
    """

    base_url: str
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float = 30.0
    credentials: Credentials = "same-origin"
    retry: RetryConfig | None = None
    cache: CacheConfig | None = None

    # Hooks: each may be sync or async
    on_request: Callable[..., Any] | None = None
    on_response: Callable[..., Any] | None = None
    on_error: Callable[..., Any] | None = None

    # Injected httpx transport (tests use httpx.MockTransport)
    transport: "httpx.AsyncBaseTransport | None" = None

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            msg = f"ClientConfig.timeout must be > 0, got {self.timeout}"
            raise ConfigurationError(msg)
        if self.credentials not in _CREDENTIALS:
            msg = f"Unknown credentials policy {self.credentials!r}; expected one of {_CREDENTIALS}"
            raise ConfigurationError(msg)
