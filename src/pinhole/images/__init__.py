"""Image cache keys, crawl harness, and blur placeholder warm-up.

Typical startup::

    from pinhole.images import warm_cache

    discovered = await warm_cache(app, engine=my_engine)

After warm-up, ``app.placeholders`` holds one SVG per blurred image and
the ``image`` template component embeds it inline.
"""

from pinhole.images.cache import PlaceholderCache
from pinhole.images.context import RenderContext
from pinhole.images.encoding import decode, encode
from pinhole.images.introspect import find_app_images, render_scoped
from pinhole.images.model import DEFAULT_BLUR, Blur, CachedImage, Resize, is_external
from pinhole.images.registry import ImageRegistry
from pinhole.images.transform import TransformEngine
from pinhole.images.warmup import warm_cache

__all__ = [
    "DEFAULT_BLUR",
    "Blur",
    "CachedImage",
    "ImageRegistry",
    "PlaceholderCache",
    "RenderContext",
    "Resize",
    "TransformEngine",
    "decode",
    "encode",
    "find_app_images",
    "is_external",
    "render_scoped",
    "warm_cache",
]
