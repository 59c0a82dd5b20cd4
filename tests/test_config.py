"""Tests for pinhole.config — AppConfig frozen dataclass."""

from pathlib import Path

import pytest

from pinhole.config import AppConfig
from pinhole.errors import ConfigurationError


class TestAppConfig:
    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert cfg.debug is False
        assert cfg.template_dir == "templates"
        assert cfg.autoescape is True
        assert cfg.image_prefix == "/cache/image"
        assert cfg.warm_workers == 4
        assert cfg.transform_retries == 2
        assert cfg.transform_timeout is None
        assert cfg.log_level == "info"

    def test_override(self) -> None:
        cfg = AppConfig(image_prefix="/img", warm_workers=1, template_dir=Path("views"))
        assert cfg.image_prefix == "/img"
        assert cfg.warm_workers == 1
        assert cfg.template_dir == Path("views")

    def test_frozen(self) -> None:
        cfg = AppConfig()
        with pytest.raises(AttributeError):
            cfg.debug = True  # type: ignore[misc]

    def test_prefix_must_be_absolute(self) -> None:
        with pytest.raises(ConfigurationError, match="image_prefix"):
            AppConfig(image_prefix="img")

    def test_workers_at_least_one(self) -> None:
        with pytest.raises(ConfigurationError, match="warm_workers"):
            AppConfig(warm_workers=0)

    def test_retries_not_negative(self) -> None:
        with pytest.raises(ConfigurationError, match="transform_retries"):
            AppConfig(transform_retries=-1)
