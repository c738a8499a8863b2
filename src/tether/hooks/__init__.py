"""Query keys and query/mutation hooks derived from a router tree."""

from tether.hooks.hooks import (
    HooksResult,
    MutationHook,
    MutationOptions,
    QueryHook,
    QueryOptions,
    create_hooks,
)
from tether.hooks.keys import build_query_keys, hash_query_key, key_matches

__all__ = [
    "HooksResult",
    "MutationHook",
    "MutationOptions",
    "QueryHook",
    "QueryOptions",
    "build_query_keys",
    "create_hooks",
    "hash_query_key",
    "key_matches",
]
