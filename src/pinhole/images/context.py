"""Render context — the explicit dependency handed to every render.

Handlers and template components never reach into shared state to find
the image registry or the placeholder cache. They receive a
``RenderContext`` and use what it carries. The crawl harness builds one
per scoped render; serving builds one per page.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

from pinhole._internal.invoke import invoke
from pinhole.config import AppConfig
from pinhole.http.request import Request
from pinhole.images.cache import PlaceholderCache
from pinhole.images.model import CachedImage
from pinhole.images.registry import ImageRegistry


@dataclass(frozen=True, slots=True)
class RenderContext:
    """Everything one render may touch.

    ``registry`` is set only during a crawl; ``placeholders`` only while
    serving. ``suppress_loading`` belongs to this render alone, so two
    concurrent crawls cannot switch each other's data loading off.
    """

    request: Request
    registry: ImageRegistry | None = None
    placeholders: PlaceholderCache | None = None
    suppress_loading: bool = False
    config: AppConfig = field(default_factory=AppConfig)

    @classmethod
    def for_crawl(cls, path: str, config: AppConfig | None = None) -> RenderContext:
        """Fresh context for one scoped render of *path*."""
        return cls(
            request=Request.synthetic_for(path),
            registry=ImageRegistry(),
            suppress_loading=True,
            config=config or AppConfig(),
        )

    @classmethod
    def for_serve(
        cls,
        request: Request,
        placeholders: PlaceholderCache | None,
        config: AppConfig | None = None,
    ) -> RenderContext:
        return cls(
            request=request,
            placeholders=placeholders,
            config=config or AppConfig(),
        )

    def with_request(self, request: Request) -> RenderContext:
        return replace(self, request=request)

    async def load(self, loader: Callable[[], Any], default: Any = None) -> Any:
        """Run a data loader unless loading is suppressed for this render.

        During a crawl the loader is not called and *default* is returned,
        so pages render their static markup without hitting databases or
        remote APIs::

            posts = await ctx.load(fetch_recent_posts, default=[])
        """
        if self.suppress_loading:
            return default
        return await invoke(loader)

    def record(self, image: CachedImage) -> None:
        """Register *image* with the crawl registry, if there is one."""
        if self.registry is not None:
            self.registry.push(image)

    def placeholder(self, image: CachedImage) -> str | None:
        """Return the pre-generated placeholder for *image*, if cached."""
        if self.placeholders is None:
            return None
        return self.placeholders.get(image)
