"""``pinhole images`` — crawl an app and list the images it references.

Runs the same isolated crawl warm-up uses, without a transform engine,
and prints one encoded URL per discovered image. Exits with code 1 if
any path failed to render.
"""

import argparse
import logging
import sys

import anyio

from pinhole.cli._resolve import resolve_app
from pinhole.errors import ConfigurationError
from pinhole.images.encoding import encode
from pinhole.images.introspect import find_app_images


def run_images(args: argparse.Namespace) -> None:
    """Print every image the static routes of an app reference."""
    try:
        app = resolve_app(args.app)
        app.routes  # noqa: B018 compiles the route table
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    logging.basicConfig(
        level=app.config.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    async def crawl():
        return await find_app_images(app, workers=args.workers)

    result = anyio.run(crawl)

    prefix = app.config.image_prefix
    urls = sorted(encode(image, prefix) for image in result.images)
    for url in urls:
        print(url)
    print(
        f"{len(result.paths)} paths, {len(urls)} images, "
        f"{sum(1 for image in result.images if image.is_blur)} blur placeholders",
        file=sys.stderr,
    )

    for failure in result.failures:
        print(f"Error: {failure}", file=sys.stderr)
    if result.failures:
        raise SystemExit(1)
