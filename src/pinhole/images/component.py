"""The ``image`` template component.

Registered as a kida global on every pinhole environment::

    {{ image(ctx, "img/hero.png", width=800, height=600, blur=true, alt="Hero") }}

Each call records the image variants the page needs on the crawl
registry (if the render is a crawl) and emits markup pointing at the
encoded URLs. When a blur placeholder was generated at warm-up, its SVG
is inlined as a ``data:`` URI so the page paints without another
round-trip; otherwise the placeholder is referenced by URL.
"""

import base64
import html

from kida.template import Markup

from pinhole.images.context import RenderContext
from pinhole.images.encoding import encode
from pinhole.images.model import DEFAULT_BLUR, CachedImage, Resize, is_external

_PLACEHOLDER_STYLE = (
    "color:transparent;background-size:cover;background-position:50% 50%;"
    "background-repeat:no-repeat;background-image:url('{url}');"
)


def _attrs(**values: str) -> str:
    return "".join(
        f' {name.rstrip("_")}="{html.escape(value, quote=True)}"'
        for name, value in values.items()
        if value or name == "alt"
    )


def placeholder_url(ctx: RenderContext, blur_image: CachedImage) -> str:
    """Return the inline ``data:`` URI if cached, else the fetch URL."""
    svg = ctx.placeholder(blur_image)
    if svg is None:
        return encode(blur_image, ctx.config.image_prefix)
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


def image(
    ctx: RenderContext,
    src: str,
    width: int,
    height: int,
    quality: int = 75,
    blur: bool = False,
    priority: bool = False,
    alt: str = "",
    class_: str = "",
) -> Markup:
    """Render an optimized ``<img>`` for a site-local image.

    Args:
        ctx: The render context of the current page.
        src: Site-local image path. Absolute URLs are passed through
            untouched and never registered.
        width: Target width; aspect ratio is preserved.
        height: Target height; aspect ratio is preserved.
        quality: Encoder quality, 0-100.
        blur: Show a blurred placeholder until the image loads.
        priority: Emit a ``<link rel="preload">`` for the image.
        alt: Alternative text.
        class_: CSS class of the ``<img>``.
    """
    if is_external(src):
        return Markup(f"<img{_attrs(src=src, alt=alt, class_=class_)}>")

    opt_image = CachedImage(src, Resize(width=width, height=height, quality=quality))
    ctx.record(opt_image)
    opt_url = encode(opt_image, ctx.config.image_prefix)

    parts: list[str] = []
    if priority:
        parts.append(f'<link rel="preload" as="image" href="{html.escape(opt_url)}">')

    if not blur:
        parts.append(f"<img{_attrs(src=opt_url, alt=alt, class_=class_)}>")
        return Markup("".join(parts))

    blur_image = CachedImage(src, DEFAULT_BLUR)
    ctx.record(blur_image)
    style = _PLACEHOLDER_STYLE.format(url=placeholder_url(ctx, blur_image))
    parts.append(f"<img{_attrs(src=opt_url, alt=alt, style=style, class_=class_)}>")
    return Markup("".join(parts))
