"""Crawl harness — find every image the static pages of an app use.

Each static path is rendered once in its own :class:`RenderContext`
with a fresh registry and data loading suppressed. The markup is thrown
away; only the registry contents are kept. A render that raises is
reported as a :class:`RenderError` for its path and contributes nothing,
so a half-filled registry never reaches the result.

Concurrency:
    Paths render in an anyio task group bounded by a CapacityLimiter.
    Registries are never shared; drained results are merged into the
    shared accumulator under an anyio Lock.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import anyio

from pinhole._internal.invoke import invoke
from pinhole._internal.types import Hook
from pinhole.errors import RenderError
from pinhole.images.context import RenderContext
from pinhole.images.model import CachedImage
from pinhole.routing.route import Route
from pinhole.routing.static import static_paths

if TYPE_CHECKING:
    from pinhole.app import App

logger = logging.getLogger("pinhole.images")


@dataclass(frozen=True, slots=True)
class CrawlResult:
    """Outcome of crawling a set of paths.

    ``images`` is deduplicated. ``failures`` keeps one error per path
    whose render raised, in crawl order.
    """

    paths: tuple[str, ...]
    images: frozenset[CachedImage]
    failures: tuple[RenderError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures


async def render_scoped(
    app: App,
    path: str,
    *,
    before: Hook | None = None,
    after: Hook | None = None,
) -> list[CachedImage]:
    """Render *path* once for its side effects and return its images.

    ``before`` and ``after`` run once each around the render; ``after``
    runs even when the render fails. Raises ``RenderError`` naming
    *path* if the app raises.
    """
    ctx = RenderContext.for_crawl(path, app.config)
    assert ctx.registry is not None

    if before is not None:
        await invoke(before)
    try:
        await app.render(ctx)
    except Exception as exc:
        raise RenderError(path, exc) from exc
    finally:
        if after is not None:
            await invoke(after)

    return ctx.registry.drain()


async def find_app_images_from_paths(
    app: App,
    paths: Iterable[str],
    *,
    before: Hook | None = None,
    after: Hook | None = None,
    workers: int | None = None,
) -> CrawlResult:
    """Crawl the given paths and merge what each render registered."""
    ordered = tuple(dict.fromkeys(paths))
    found: set[CachedImage] = set()
    failed: dict[str, RenderError] = {}
    lock = anyio.Lock()
    limiter = anyio.CapacityLimiter(workers or app.config.warm_workers)

    async def crawl(path: str) -> None:
        async with limiter:
            try:
                images = await render_scoped(app, path, before=before, after=after)
            except RenderError as exc:
                logger.warning("Image crawl of %r failed: %r", path, exc.cause)
                async with lock:
                    failed[path] = exc
                return
        logger.debug("Image crawl of %r found %d images", path, len(images))
        async with lock:
            found.update(images)

    async with anyio.create_task_group() as tg:
        for path in ordered:
            tg.start_soon(crawl, path)

    return CrawlResult(
        paths=ordered,
        images=frozenset(found),
        failures=tuple(failed[p] for p in ordered if p in failed),
    )


async def find_app_images(
    app: App,
    routes: Sequence[Route] | None = None,
    *,
    before: Hook | None = None,
    after: Hook | None = None,
    workers: int | None = None,
) -> CrawlResult:
    """Crawl every static route of *app*.

    *routes* defaults to the app's own route table.
    """
    paths = static_paths(app.routes if routes is None else routes)
    return await find_app_images_from_paths(
        app, paths, before=before, after=after, workers=workers
    )
