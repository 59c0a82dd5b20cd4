"""Placeholder warm-up — run once at startup, before serving traffic.

1. Enumerate the app's static paths.
2. Crawl each path in isolation and merge the images it registered.
3. Ask the transform engine for a placeholder for every blur image.
4. Insert each payload into the app's placeholder cache, then freeze it.

Resize variants are only discovered, never pre-generated; they are
produced on demand when the browser requests them.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

import anyio

from pinhole._internal.types import Hook
from pinhole.errors import TransformError
from pinhole.images.cache import PlaceholderCache
from pinhole.images.introspect import find_app_images
from pinhole.images.model import CachedImage
from pinhole.images.transform import TransformEngine, as_payload
from pinhole.routing.route import Route

if TYPE_CHECKING:
    from pinhole.app import App

logger = logging.getLogger("pinhole.images")


async def _call_engine(engine: TransformEngine, image: CachedImage) -> str | bytes:
    """Run one transform without blocking the event loop.

    Sync engines run in an anyio worker thread. The thread is abandoned
    on cancellation, so a timeout frees the warm-up even while the
    blocking call is still running.
    """
    if inspect.iscoroutinefunction(engine.transform):
        return await engine.transform(image)
    result = await anyio.to_thread.run_sync(
        engine.transform, image, abandon_on_cancel=True
    )
    if inspect.isawaitable(result):
        result = await result
    return result


async def generate_placeholder(
    engine: TransformEngine,
    image: CachedImage,
    *,
    retries: int = 2,
    delay: float = 0.1,
    timeout: float | None = None,
) -> str:
    """Call the engine for *image*, retrying with exponential back-off.

    Each attempt is bounded by *timeout* seconds when given. Raises
    ``TransformError`` once ``retries + 1`` attempts have failed.
    """
    attempt = 0
    while True:
        try:
            with anyio.fail_after(timeout):
                result = await _call_engine(engine, image)
            return as_payload(result)
        except Exception as exc:
            if attempt >= retries:
                raise TransformError(image, exc) from exc
            attempt += 1
            logger.debug(
                "Transform of %r failed (attempt %d/%d): %r",
                image.src, attempt, retries + 1, exc,
            )
            await anyio.sleep(delay * 2 ** (attempt - 1))


async def _fill(
    cache: PlaceholderCache,
    engine: TransformEngine,
    image: CachedImage,
    app: App,
) -> None:
    config = app.config
    try:
        payload = await generate_placeholder(
            engine,
            image,
            retries=config.transform_retries,
            delay=config.transform_retry_delay,
            timeout=config.transform_timeout,
        )
    except TransformError as exc:
        logger.warning(
            "No placeholder for %r; pages will fetch it instead",
            image.src,
            exc_info=exc.cause,
        )
        return
    cache.insert(image, payload)


async def warm_cache(
    app: App,
    routes: Sequence[Route] | None = None,
    *,
    engine: TransformEngine,
    before: Hook | None = None,
    after: Hook | None = None,
    workers: int | None = None,
) -> set[CachedImage]:
    """Crawl *app*, pre-generate blur placeholders, and freeze the cache.

    Returns every unique image the crawl discovered. Paths whose render
    fails and images whose transform fails are logged and skipped; they
    never abort the warm-up of anything else.

    Running warm-up again is a no-op for images already cached: the
    engine is not called for them.
    """
    crawl = await find_app_images(
        app, routes, before=before, after=after, workers=workers
    )
    cache = app.placeholders

    pending = [img for img in crawl.images if img.is_blur and img not in cache]
    if pending and cache.frozen:
        logger.warning(
            "Placeholder cache is frozen; %d new blur images will be fetched on demand",
            len(pending),
        )
        pending = []

    async with anyio.create_task_group() as tg:
        for image in pending:
            tg.start_soon(_fill, cache, engine, image, app)

    cache.freeze()
    logger.info(
        "Image warm-up: %d paths, %d images, %d placeholders, %d failed paths",
        len(crawl.paths), len(crawl.images), len(cache), len(crawl.failures),
    )
    return set(crawl.images)
