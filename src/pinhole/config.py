"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path

from pinhole.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(template_dir="views", warm_workers=8)
    """

    debug: bool = False

    # Templates
    template_dir: str | Path = "templates"
    component_dirs: tuple[str | Path, ...] = ()  # Additional template directories (e.g. components, partials)
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True

    # Images
    image_prefix: str = "/cache/image"  # Path prefix of encoded image URLs
    warm_workers: int = 4  # Concurrent scoped renders during warm-up
    transform_retries: int = 2  # Extra attempts per placeholder after the first failure
    transform_retry_delay: float = 0.1  # Seconds; doubled after each failed attempt
    transform_timeout: float | None = None  # Seconds per attempt; None waits indefinitely

    # Logging
    log_level: str = "info"

    def __post_init__(self) -> None:
        if not self.image_prefix.startswith("/"):
            msg = f"image_prefix must start with '/', got {self.image_prefix!r}"
            raise ConfigurationError(msg)
        if self.warm_workers < 1:
            msg = f"warm_workers must be at least 1, got {self.warm_workers}"
            raise ConfigurationError(msg)
        if self.transform_retries < 0:
            msg = f"transform_retries cannot be negative, got {self.transform_retries}"
            raise ConfigurationError(msg)
