"""Canonical image URL encoding.

One pure function turns a :class:`CachedImage` into the path the browser
requests, and the same string is the cache key's textual form. Crawl and
serve time both go through :func:`encode`, so a placeholder generated
during warm-up is found again by real rendering.

Format (fields always in this order)::

    <prefix>/<src>?kind=resize&w=<width>&h=<height>&q=<quality>
    <prefix>/<src>?kind=blur&w=<width>&h=<height>&sw=<svg_width>&sh=<svg_height>&s=<sigma>

``<src>`` is percent-quoted with ``/`` left readable, so ``?``, ``&``,
``#`` and ``%`` in a file name cannot leak into the query string.
"""

from urllib.parse import parse_qsl, quote, unquote, urlsplit

from pinhole.images.model import Blur, CachedImage, Resize

DEFAULT_PREFIX = "/cache/image"

# query key -> dataclass field, in canonical order
_RESIZE_FIELDS = (("w", "width"), ("h", "height"), ("q", "quality"))
_BLUR_FIELDS = (
    ("w", "width"),
    ("h", "height"),
    ("sw", "svg_width"),
    ("sh", "svg_height"),
    ("s", "sigma"),
)


def encode(image: CachedImage, prefix: str = DEFAULT_PREFIX) -> str:
    """Return the canonical URL of *image* under *prefix*."""
    match image.option:
        case Resize():
            kind, keys = "resize", _RESIZE_FIELDS
        case Blur():
            kind, keys = "blur", _BLUR_FIELDS
        case _:
            msg = f"Unsupported transform {image.option!r}"
            raise TypeError(msg)
    query = "&".join(f"{key}={getattr(image.option, name)}" for key, name in keys)
    return f"{prefix.rstrip('/')}/{quote(image.src, safe='/')}?kind={kind}&{query}"


def decode(url: str, prefix: str = DEFAULT_PREFIX) -> CachedImage:
    """Parse a URL produced by :func:`encode` back into its CachedImage.

    Raises ``ValueError`` when the URL is outside *prefix*, names an
    unknown kind, or lacks a field.
    """
    parts = urlsplit(url)
    base = prefix.rstrip("/") + "/"
    if not parts.path.startswith(base) or len(parts.path) == len(base):
        msg = f"{url!r} is not an image URL under {prefix!r}"
        raise ValueError(msg)
    src = unquote(parts.path[len(base) :])
    query = dict(parse_qsl(parts.query, strict_parsing=True))

    kind = query.get("kind")
    match kind:
        case "resize":
            cls, keys = Resize, _RESIZE_FIELDS
        case "blur":
            cls, keys = Blur, _BLUR_FIELDS
        case _:
            msg = f"Unknown image kind {kind!r} in {url!r}"
            raise ValueError(msg)

    values: dict[str, int] = {}
    for key, name in keys:
        raw = query.get(key)
        if raw is None or not raw.isdigit():
            msg = f"Missing or non-numeric {key!r} in {url!r}"
            raise ValueError(msg)
        values[name] = int(raw)
    return CachedImage(src, cls(**values))
