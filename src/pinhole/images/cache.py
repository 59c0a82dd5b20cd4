"""Placeholder cache — pre-generated blur SVGs keyed by CachedImage.

Populated once by warm-up, then frozen and read by every render.

Free-threading safety:
    - Keys are frozen dataclasses and payloads are ``str`` (immutable)
    - Writes take a Lock and only ever add a key, never replace one
    - Reads never lock; a key is published only after its payload exists
"""

import logging
import threading
from collections.abc import Iterator

from pinhole.images.model import CachedImage

logger = logging.getLogger("pinhole.images")


class PlaceholderCache:
    """Write-once, read-many mapping of blur images to SVG payloads.

    Usage::

        cache = PlaceholderCache()
        cache.insert(CachedImage.blur("hero.png"), "<svg ...>")
        cache.freeze()
        svg = cache.get(CachedImage.blur("hero.png"))
    """

    __slots__ = ("_entries", "_frozen", "_lock")

    def __init__(self) -> None:
        self._entries: dict[CachedImage, str] = {}
        self._frozen = False
        self._lock = threading.Lock()

    def insert(self, image: CachedImage, payload: str) -> bool:
        """Store *payload* for *image* unless the key is already present.

        Returns True when the payload was stored. The first writer wins:
        a second insert for the same key is ignored.

        Raises ``ValueError`` for non-blur keys and ``RuntimeError``
        when a new key arrives after the cache is frozen.
        """
        if not image.is_blur:
            msg = f"Only blur placeholders are cached, got {image.option!r}"
            raise ValueError(msg)
        with self._lock:
            existing = self._entries.get(image)
            if existing is not None:
                if existing != payload:
                    logger.debug("Keeping first placeholder for %r", image.src)
                return False
            if self._frozen:
                msg = "Cannot insert into the placeholder cache after warm-up."
                raise RuntimeError(msg)
            self._entries[image] = payload
            return True

    def get(self, image: CachedImage) -> str | None:
        return self._entries.get(image)

    def freeze(self) -> None:
        """Reject further writes."""
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def keys(self) -> frozenset[CachedImage]:
        return frozenset(self._entries)

    def snapshot(self) -> dict[CachedImage, str]:
        """Return a copy of every entry."""
        with self._lock:
            return dict(self._entries)

    def __contains__(self, image: object) -> bool:
        return image in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CachedImage]:
        return iter(self.keys())

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "warming"
        return f"<PlaceholderCache {len(self._entries)} entries, {state}>"
