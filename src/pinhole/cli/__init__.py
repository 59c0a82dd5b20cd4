"""Pinhole CLI — route listing and image crawl inspection.

Entry point registered as ``pinhole`` in ``pyproject.toml``::

    [project.scripts]
    pinhole = "pinhole.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``pinhole`` command."""
    parser = argparse.ArgumentParser(
        prog="pinhole",
        description="Pinhole — server-rendered pages with pre-warmed image placeholders.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- pinhole routes ---------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- pinhole images ---------------------------------------------------
    images_parser = subparsers.add_parser(
        "images", help="Crawl static routes and list the images they use"
    )
    images_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    images_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Concurrent renders (defaults to AppConfig.warm_workers)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from pinhole.cli._routes import run_routes

        run_routes(args)
    elif args.command == "images":
        from pinhole.cli._images import run_images

        run_images(args)
