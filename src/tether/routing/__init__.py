"""Route contracts, router trees, and path template handling."""

from tether.routing.paths import (
    compile_path,
    extract_param_names,
    join_url,
    match_and_extract,
    normalize_request_path,
    resolve_params,
    substitute,
    to_placeholder_syntax,
)
from tether.routing.route import HTTP_METHODS, RouteContract, RouteDocs, RouteMatch, define_route
from tether.routing.router import RouteTable
from tether.routing.tree import (
    RouterTree,
    collect_routes,
    define_router,
    get_route,
    is_route,
    is_router,
    merge_routers,
)

__all__ = [
    "HTTP_METHODS",
    "RouteContract",
    "RouteDocs",
    "RouteMatch",
    "RouteTable",
    "RouterTree",
    "collect_routes",
    "compile_path",
    "define_route",
    "define_router",
    "extract_param_names",
    "get_route",
    "is_route",
    "is_router",
    "join_url",
    "match_and_extract",
    "merge_routers",
    "normalize_request_path",
    "resolve_params",
    "substitute",
    "to_placeholder_syntax",
]
