"""Tether: one route contract, three consumers.

Declare each route once; serve it, call it, and cache it from the same
declaration.

Declare::

    from tether import define_route, define_router

    api = define_router({
        "projects": {
            "get": define_route("GET", "/api/projects/{project_id}"),
            "create": define_route("POST", "/api/projects"),
        },
    })

Serve::

    from tether import AsgiApp, CanonicalResponse, server_routes

    async def get_project(request):
        return CanonicalResponse(200, body={"id": request.path_params["project_id"]})

    app = AsgiApp(server_routes(api).handle("projects.get", get_project).build_partial())

Call::

    from tether import ClientConfig, create_client

    client = create_client(api, ClientConfig(base_url="https://api.example.com"))
    project = await client.projects.get(path_params={"project_id": "p1"})
"""

__version__ = "0.1.0"
__all__ = [
    "AsgiApp",
    "CacheConfig",
    "CanonicalRequest",
    "CanonicalResponse",
    "ClientConfig",
    "ClientError",
    "ConfigurationError",
    "RetryConfig",
    "RouteContract",
    "ServerConfig",
    "TetherError",
    "WsgiApp",
    "create_client",
    "create_hooks",
    "define_route",
    "define_router",
    "lambda_handler",
    "server_routes",
    "use_case_handler",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import tether`` fast while providing a clean top-level API.
    """
    if name in ("define_route", "RouteContract"):
        from tether.routing import route

        return getattr(route, name)

    if name == "define_router":
        from tether.routing.tree import define_router

        return define_router

    if name in ("ClientConfig", "RetryConfig", "CacheConfig", "ServerConfig"):
        from tether import config

        return getattr(config, name)

    if name in ("TetherError", "ConfigurationError"):
        from tether import errors

        return getattr(errors, name)

    if name == "CanonicalRequest":
        from tether.http.request import CanonicalRequest

        return CanonicalRequest

    if name == "CanonicalResponse":
        from tether.http.response import CanonicalResponse

        return CanonicalResponse

    if name in ("server_routes", "use_case_handler"):
        from tether.server import routes

        return getattr(routes, name)

    if name in ("AsgiApp", "WsgiApp", "lambda_handler"):
        from tether.server import app

        return getattr(app, name)

    if name == "create_client":
        from tether.client.client import create_client

        return create_client

    if name == "ClientError":
        from tether.client.errors import ClientError

        return ClientError

    if name == "create_hooks":
        from tether.hooks.hooks import create_hooks

        return create_hooks

    msg = f"module 'tether' has no attribute {name!r}"
    raise AttributeError(msg)
