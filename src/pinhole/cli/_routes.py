"""``pinhole routes`` — list registered routes.

Prints METHOD, PATH, CRAWL and HANDLER for every route. CRAWL tells
whether warm-up renders the route (``static``) or skips it
(``dynamic``, or ``invalid`` for a malformed template).
"""

import argparse
import sys

from pinhole.cli._resolve import resolve_app
from pinhole.errors import ConfigurationError
from pinhole.routing.route import Route


def _crawl_status(route: Route) -> str:
    try:
        return "static" if route.is_static else "dynamic"
    except ConfigurationError:
        return "invalid"


def run_routes(args: argparse.Namespace) -> None:
    """List registered routes for a pinhole app."""
    try:
        app = resolve_app(args.app)
        routes = app.routes
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not routes:
        print("No routes registered.")
        return

    rows: list[tuple[str, str, str, str]] = []
    for route in routes:
        handler_name = getattr(route.handler, "__name__", str(route.handler))
        if route.name:
            handler_name = f"{handler_name} ({route.name})"
        rows.append(
            (", ".join(sorted(route.methods)), route.path, _crawl_status(route), handler_name)
        )

    max_methods = max(6, *(len(r[0]) for r in rows))  # "METHOD" header
    max_path = max(4, *(len(r[1]) for r in rows))  # "PATH" header

    fmt = f"{{:<{max_methods}}}  {{:<{max_path}}}  {{:<7}}  {{}}"
    print(fmt.format("METHOD", "PATH", "CRAWL", "HANDLER"))
    sep_len = max_methods + max_path + 13 + max(len(r[3]) for r in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))
