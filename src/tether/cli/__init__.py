"""Tether CLI: route contract introspection.

Entry point registered as ``tether`` in ``pyproject.toml``::

    [project.scripts]
    tether = "tether.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``tether`` command."""
    parser = argparse.ArgumentParser(
        prog="tether",
        description="tether: one route contract for server, client and hooks.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- tether routes ----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List routes of a router tree or app")
    routes_parser.add_argument(
        "target",
        help="Import string (e.g. myapi.contracts:api or myapi.main:app)",
    )
    routes_parser.add_argument(
        "--style",
        choices=("braces", "colon", "angle"),
        default="braces",
        help="Placeholder syntax for printed paths (default: braces)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from tether.cli._routes import run_routes

        run_routes(args)
