"""``tether routes``: print a table of METHOD, PATH, KEY and SUMMARY."""

import argparse
import sys

from tether.cli._resolve import list_routes
from tether.routing.paths import to_placeholder_syntax

_STYLES = {"braces": ("{", "}"), "colon": (":", ""), "angle": ("<", ">")}


def run_routes(args: argparse.Namespace) -> None:
    try:
        routes = list_routes(args.target)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not routes:
        print("No routes declared.")
        return

    prefix, suffix = _STYLES[args.style]
    rows: list[tuple[str, str, str, str]] = []
    for key, route in routes:
        summary = route.docs.summary or ""
        if route.docs.deprecated:
            summary = f"[deprecated] {summary}".rstrip()
        rows.append((route.method, to_placeholder_syntax(route.path, prefix, suffix), key, summary))

    max_method = max(6, *(len(r[0]) for r in rows))
    max_path = max(4, *(len(r[1]) for r in rows))
    max_key = max(3, *(len(r[2]) for r in rows))

    fmt = f"{{:<{max_method}}}  {{:<{max_path}}}  {{:<{max_key}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "KEY", "SUMMARY").rstrip())
    print("-" * min(max_method + max_path + max_key + 6 + 7, 80))
    for row in rows:
        print(fmt.format(*row).rstrip())
