"""Client execution engine: one route call, end to end.

Per call: build the URL, apply the request hook, answer GETs from the
cache when possible, send with a timeout, classify failures, retry,
apply the response hook, write the cache. The error hook sees only
the final failure.

Each attempt opens its own ``httpx.AsyncClient``; connection reuse is
left to the transport.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import urlsplit

import anyio
import httpx

from tether._internal.invoke import invoke
from tether.client.cache import CacheStore, cache_key
from tether.client.errors import ClientError
from tether.client.retry import with_retry
from tether.client.urls import build_url
from tether.config import ClientConfig
from tether.routing.route import RouteContract

logger = logging.getLogger("tether.client")

BODYLESS_METHODS = frozenset({"GET", "DELETE"})


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """The outgoing request, as seen and rewritten by ``on_request``.

    ``body`` is the Python value to JSON-encode, or ``None``.
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None


@dataclass(frozen=True, slots=True)
class ResponseContext:
    url: str
    method: str
    status: int
    headers: Mapping[str, str]


@dataclass(frozen=True, slots=True)
class ErrorContext:
    url: str
    method: str
    attempt: int


def _origin(url: str) -> tuple[str, str]:
    parts = urlsplit(url)
    return parts.scheme.lower(), parts.netloc.lower()


def apply_credentials(descriptor: RequestDescriptor, config: ClientConfig) -> RequestDescriptor:
    """Drop the ``cookie`` header when the credentials policy forbids it."""
    if "cookie" not in descriptor.headers or config.credentials == "include":
        return descriptor
    if config.credentials == "same-origin" and _origin(descriptor.url) == _origin(config.base_url):
        return descriptor
    headers = {k: v for k, v in descriptor.headers.items() if k != "cookie"}
    return replace(descriptor, headers=headers)


def _merge_headers(*sources: Mapping[str, str] | None) -> dict[str, str]:
    merged: dict[str, str] = {}
    for source in sources:
        for name, value in (source or {}).items():
            merged[name.lower()] = value
    return merged


def parse_response_body(response: httpx.Response) -> Any:
    """JSON for ``application/json`` (and ``+json``), text otherwise."""
    content_type = response.headers.get("content-type", "").lower()
    media = content_type.split(";")[0].strip()
    if media == "application/json" or media.endswith("+json"):
        if not response.content:
            return None
        try:
            return response.json()
        except json.JSONDecodeError:
            return response.text
    return response.text


async def send_once(
    descriptor: RequestDescriptor,
    config: ClientConfig,
) -> tuple[Any, ResponseContext]:
    """Send one attempt. Raises ``ClientError`` for every failure."""
    content: bytes | None = None
    if descriptor.body is not None and descriptor.method not in BODYLESS_METHODS:
        content = json.dumps(descriptor.body).encode("utf-8")

    try:
        with anyio.fail_after(config.timeout):
            async with httpx.AsyncClient(transport=config.transport, timeout=config.timeout) as client:
                response = await client.request(
                    descriptor.method,
                    descriptor.url,
                    headers=descriptor.headers,
                    content=content,
                )
    except (TimeoutError, httpx.TimeoutException):
        raise ClientError.timeout_error(descriptor.url, config.timeout) from None
    except httpx.TransportError as exc:
        raise ClientError.network_error(exc) from exc

    logger.debug("%s %s -> %d", descriptor.method, descriptor.url, response.status_code)
    body = parse_response_body(response)
    if not response.is_success:
        raise ClientError.from_response(response.status_code, body)

    context = ResponseContext(
        url=descriptor.url,
        method=descriptor.method,
        status=response.status_code,
        headers=dict(response.headers),
    )
    return body, context


async def execute_request(
    route: RouteContract[Any, Any],
    config: ClientConfig,
    *,
    path_params: Mapping[str, Any] | None = None,
    query_params: Mapping[str, Any] | None = None,
    body: Any = None,
    headers: Mapping[str, str] | None = None,
    cache: CacheStore | None = None,
) -> Any:
    """Call *route* and return the parsed response body.

    Raises:
        PathParamError: A path placeholder has no value (before any I/O).
        ClientError: The call failed after all retries.
    """
    method = route.method
    descriptor = RequestDescriptor(
        method=method,
        url=build_url(config.base_url, route.path, path_params, query_params),
        headers=_merge_headers({"content-type": "application/json"}, config.headers, headers),
        body=None if method in BODYLESS_METHODS else body,
    )
    if config.on_request is not None:
        descriptor = await invoke(config.on_request, descriptor)
    descriptor = apply_credentials(descriptor, config)

    use_cache = cache is not None and config.cache is not None and method == "GET"
    key = cache_key(method, descriptor.url)
    if use_cache:
        hit = await cache.get(key)
        if hit is not None:
            logger.debug("cache hit %s", key)
            return hit.value

    last_attempt = 1

    async def attempt(number: int) -> tuple[Any, ResponseContext]:
        nonlocal last_attempt
        last_attempt = number
        return await send_once(descriptor, config)

    try:
        result, context = await with_retry(attempt, config.retry)
    except ClientError as exc:
        if config.on_error is not None:
            await invoke(config.on_error, exc, ErrorContext(descriptor.url, method, last_attempt))
        raise

    if config.on_response is not None:
        result = await invoke(config.on_response, result, context)
    if use_cache:
        await cache.set(key, result, config.cache.ttl)
    return result
