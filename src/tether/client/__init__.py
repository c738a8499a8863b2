"""Generated HTTP client: URL building, retry, caching, and execution."""

from tether.client.cache import CacheEntry, CacheStore, MemoryCache, SQLiteCache, cache_key, make_cache
from tether.client.client import Client, ClientNamespace, RouteCaller, create_client
from tether.client.errors import ClientError
from tether.client.execute import ErrorContext, RequestDescriptor, ResponseContext, execute_request
from tether.client.retry import calculate_retry_delay, should_retry, with_retry
from tether.client.urls import build_url, encode_query

__all__ = [
    "CacheEntry",
    "CacheStore",
    "Client",
    "ClientError",
    "ClientNamespace",
    "ErrorContext",
    "MemoryCache",
    "RequestDescriptor",
    "ResponseContext",
    "RouteCaller",
    "SQLiteCache",
    "build_url",
    "cache_key",
    "calculate_retry_delay",
    "create_client",
    "encode_query",
    "execute_request",
    "make_cache",
    "should_retry",
    "with_retry",
]
