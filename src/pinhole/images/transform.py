"""Transform engine protocol.

Pixel work (decoding, resizing, blurring, SVG wrapping) lives outside
pinhole. The host application passes an object with a ``transform``
method; it may be sync or async and may raise for any single image.
"""

from collections.abc import Awaitable
from typing import Protocol, runtime_checkable

from pinhole.images.model import CachedImage


@runtime_checkable
class TransformEngine(Protocol):
    """Produces the placeholder payload for one blur image.

    The payload is an SVG document, returned as ``str`` or UTF-8
    ``bytes``.
    """

    def transform(
        self, image: CachedImage
    ) -> str | bytes | Awaitable[str | bytes]: ...


def as_payload(result: str | bytes) -> str:
    """Normalize an engine result to the cached ``str`` form."""
    if isinstance(result, bytes):
        return result.decode("utf-8")
    if isinstance(result, str):
        return result
    msg = f"Transform engine returned {type(result).__name__}, expected str or bytes"
    raise TypeError(msg)
