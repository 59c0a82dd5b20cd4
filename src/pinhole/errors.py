"""Pinhole exception hierarchy.

Shared across the router, the app, the crawl harness, and the warm-up
pipeline so every module raises and catches the same types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pinhole.images.model import CachedImage


class PinholeError(Exception):
    """Base for all pinhole-specific errors."""


class ConfigurationError(PinholeError):
    """Raised when app configuration or a route template is invalid.

    The route enumerator catches these and skips the offending route.
    """


class RenderError(PinholeError):
    """A scoped render failed for one route path.

    The partial image registry of the failed render is discarded;
    ``path`` tells which route to look at.
    """

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Rendering {path!r} failed: {cause!r}")


class TransformError(PinholeError):
    """The transform engine could not produce a placeholder for one image."""

    def __init__(self, image: CachedImage, cause: BaseException) -> None:
        self.image = image
        self.cause = cause
        super().__init__(f"Transform of {image.src!r} failed: {cause!r}")


@dataclass(frozen=True, slots=True)
class HTTPError(PinholeError):
    """An error that maps directly to an HTTP status code.

    Raised by the router when a serve-time render targets a path that
    no route handles.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """405 — route exists but not for this HTTP method."""

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
