"""Image cache key model.

A :class:`CachedImage` names one required variant of a site-local image:
the source plus either a :class:`Resize` (full delivery) or a
:class:`Blur` (tiny placeholder). All three are frozen dataclasses, so
equality and hashing are structural and they can key dicts and sets.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

_EXTERNAL_PREFIXES = ("http://", "https://", "//", "data:")


def is_external(src: str) -> bool:
    """True for sources the optimization pipeline passes through untouched."""
    return src.lower().startswith(_EXTERNAL_PREFIXES)


def _check_non_negative(variant: object) -> None:
    for f in fields(variant):  # type: ignore[arg-type]
        value = getattr(variant, f.name)
        if isinstance(value, bool) or not isinstance(value, int):
            msg = f"{type(variant).__name__}.{f.name} must be an int, got {value!r}"
            raise TypeError(msg)
        if value < 0:
            msg = f"{type(variant).__name__}.{f.name} cannot be negative, got {value}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Resize:
    """Full-resolution delivery, scaled to fit ``width`` x ``height``."""

    width: int
    height: int
    quality: int = 75

    def __post_init__(self) -> None:
        _check_non_negative(self)
        if self.quality > 100:
            msg = f"Resize.quality must be within 0-100, got {self.quality}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Blur:
    """Low-resolution placeholder.

    The source is shrunk to ``width`` x ``height``, blurred with
    ``sigma``, and wrapped in an SVG of ``svg_width`` x ``svg_height``.
    """

    width: int
    height: int
    svg_width: int
    svg_height: int
    sigma: int

    def __post_init__(self) -> None:
        _check_non_negative(self)


DEFAULT_BLUR = Blur(width=25, height=25, svg_width=100, svg_height=100, sigma=15)


@dataclass(frozen=True, slots=True)
class CachedImage:
    """One (source, transform) pair — the placeholder cache key.

    ``src`` must be site-local; constructing a CachedImage for an
    absolute URL raises ``ValueError``.
    """

    src: str
    option: Resize | Blur

    def __post_init__(self) -> None:
        if not self.src:
            msg = "CachedImage.src cannot be empty"
            raise ValueError(msg)
        if is_external(self.src):
            msg = f"External source {self.src!r} cannot be cached"
            raise ValueError(msg)

    @property
    def is_blur(self) -> bool:
        return isinstance(self.option, Blur)

    @classmethod
    def resize(cls, src: str, width: int, height: int, quality: int = 75) -> CachedImage:
        return cls(src, Resize(width=width, height=height, quality=quality))

    @classmethod
    def blur(cls, src: str, option: Blur = DEFAULT_BLUR) -> CachedImage:
        return cls(src, option)
