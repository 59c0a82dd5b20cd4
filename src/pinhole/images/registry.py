"""Per-render image registry."""

from collections.abc import Iterator

from pinhole.images.model import CachedImage


class ImageRegistry:
    """Append-only list of the images one render referenced.

    Each scoped render gets its own registry; the crawl harness drains
    it once the render finishes. Duplicates are kept, deduplication
    happens when drained registries are merged.
    """

    __slots__ = ("_images",)

    def __init__(self) -> None:
        self._images: list[CachedImage] = []

    def push(self, image: CachedImage) -> None:
        self._images.append(image)

    def drain(self) -> list[CachedImage]:
        """Return a copy of everything pushed so far."""
        return list(self._images)

    def __len__(self) -> int:
        return len(self._images)

    def __iter__(self) -> Iterator[CachedImage]:
        return iter(tuple(self._images))

    def __repr__(self) -> str:
        return f"<ImageRegistry {len(self._images)} images>"
