"""Shared fixtures: a small site and a scriptable transform engine."""

import pytest

from pinhole.app import App
from pinhole.config import AppConfig
from pinhole.images.component import image
from pinhole.images.model import CachedImage


class FakeEngine:
    """Transform engine that records calls and fails on request.

    ``fail`` maps a source to the number of calls that raise before the
    engine starts succeeding; ``-1`` fails forever.
    """

    def __init__(self, fail: dict[str, int] | None = None) -> None:
        self.calls: list[CachedImage] = []
        self._fail = dict(fail or {})

    def transform(self, image: CachedImage) -> str:
        self.calls.append(image)
        remaining = self._fail.get(image.src, 0)
        if remaining:
            self._fail[image.src] = remaining - 1
            raise OSError(f"cannot decode {image.src}")
        return f'<svg data-src="{image.src}" data-sigma="{image.option.sigma}"/>'


def build_site(config: AppConfig | None = None) -> App:
    """``/`` shows a blurred hero, ``/about`` has no images."""
    app = App(config or AppConfig(transform_retry_delay=0))

    @app.route("/")
    def index(ctx):
        return f"<main>{image(ctx, 'hero.png', width=800, height=600, blur=True)}</main>"

    @app.route("/about")
    def about():
        return "<h1>About</h1>"

    @app.route("/posts/{slug}")
    def post(ctx, slug):
        return str(image(ctx, f"posts/{slug}.png", width=400, height=300, blur=True))

    return app


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def site() -> App:
    return build_site()
