"""Tests for pinhole.images.warmup — placeholder pre-generation."""

import base64
import html
import logging
import time

import anyio
import pytest

from conftest import FakeEngine, build_site
from pinhole.app import App
from pinhole.config import AppConfig
from pinhole.errors import TransformError
from pinhole.images.component import image
from pinhole.images.encoding import encode
from pinhole.images.model import DEFAULT_BLUR, CachedImage, Resize
from pinhole.images.warmup import generate_placeholder, warm_cache

HERO_RESIZE = CachedImage("hero.png", Resize(width=800, height=600, quality=75))
HERO_BLUR = CachedImage("hero.png", DEFAULT_BLUR)


class TestWarmCache:
    async def test_home_and_about(self, site: App, engine: FakeEngine) -> None:
        discovered = await warm_cache(site, engine=engine)

        assert discovered == {HERO_BLUR, HERO_RESIZE}
        assert site.placeholders.keys() == frozenset({HERO_BLUR})
        assert engine.calls == [HERO_BLUR]

    async def test_resize_variants_never_cached(self, engine: FakeEngine) -> None:
        app = App()

        @app.route("/")
        def index(ctx):
            return "".join(
                str(image(ctx, f"{n}.png", width=100, height=100, blur=n % 2 == 0))
                for n in range(6)
            )

        discovered = await warm_cache(app, engine=engine)
        blurs = {img for img in discovered if img.is_blur}
        assert len(discovered) == 9
        assert app.placeholders.keys() == blurs
        assert all(img.is_blur for img in engine.calls)

    async def test_explicit_route_table(self, site: App, engine: FakeEngine) -> None:
        about = [r for r in site.routes if r.path == "/about"]
        assert await warm_cache(site, about, engine=engine) == set()
        assert len(site.placeholders) == 0

    async def test_cache_frozen_afterwards(self, site: App, engine: FakeEngine) -> None:
        await warm_cache(site, engine=engine)
        assert site.placeholders.frozen

    async def test_idempotent_on_same_app(self, site: App, engine: FakeEngine) -> None:
        await warm_cache(site, engine=engine)
        first = site.placeholders.snapshot()
        await warm_cache(site, engine=engine)
        assert site.placeholders.snapshot() == first
        assert len(engine.calls) == 1

    async def test_identical_across_runs(self) -> None:
        first, second = build_site(), build_site()
        await warm_cache(first, engine=FakeEngine())
        await warm_cache(second, engine=FakeEngine())
        assert first.placeholders.snapshot() == second.placeholders.snapshot()

    async def test_failed_render_does_not_abort(self, engine: FakeEngine) -> None:
        app = App()

        @app.route("/")
        def index(ctx):
            return str(image(ctx, "ok.png", width=10, height=10, blur=True))

        @app.route("/broken")
        def broken(ctx):
            image(ctx, "partial.png", width=10, height=10, blur=True)
            raise RuntimeError("boom")

        discovered = await warm_cache(app, engine=engine)
        assert {img.src for img in discovered} == {"ok.png"}
        assert app.placeholders.keys() == frozenset({CachedImage.blur("ok.png")})

    async def test_transform_failure_omits_key(self, caplog: pytest.LogCaptureFixture) -> None:
        app = App(AppConfig(transform_retries=1, transform_retry_delay=0))

        @app.route("/")
        def index(ctx):
            return (
                f"{image(ctx, 'good.png', width=10, height=10, blur=True)}"
                f"{image(ctx, 'bad.png', width=10, height=10, blur=True)}"
            )

        engine = FakeEngine(fail={"bad.png": -1})
        with caplog.at_level(logging.WARNING, logger="pinhole.images"):
            discovered = await warm_cache(app, engine=engine)

        assert CachedImage.blur("bad.png") in discovered
        assert app.placeholders.keys() == frozenset({CachedImage.blur("good.png")})
        assert "bad.png" in caplog.text
        assert [img.src for img in engine.calls].count("bad.png") == 2

    async def test_transient_failure_retried(self) -> None:
        app = build_site()
        engine = FakeEngine(fail={"hero.png": 1})
        await warm_cache(app, engine=engine)
        assert HERO_BLUR in app.placeholders
        assert len(engine.calls) == 2

    async def test_async_engine_with_bytes(self, site: App) -> None:
        class AsyncEngine:
            async def transform(self, image: CachedImage) -> bytes:
                await anyio.sleep(0)
                return b"<svg>async</svg>"

        await warm_cache(site, engine=AsyncEngine())
        assert site.placeholders.get(HERO_BLUR) == "<svg>async</svg>"

    async def test_slow_engine_times_out(self) -> None:
        app = build_site(
            AppConfig(transform_timeout=0.01, transform_retries=0, transform_retry_delay=0)
        )

        class SlowEngine:
            async def transform(self, image: CachedImage) -> str:
                await anyio.sleep(5)
                return "<svg/>"

        discovered = await warm_cache(app, engine=SlowEngine())
        assert HERO_BLUR in discovered
        assert len(app.placeholders) == 0

    async def test_blocking_sync_engine_times_out(self) -> None:
        app = App(AppConfig(transform_timeout=0.05, transform_retries=0))

        @app.route("/")
        def index(ctx):
            return "".join(
                str(image(ctx, f"{n}.png", width=100, height=100, blur=True))
                for n in range(4)
            )

        class BlockingEngine:
            def transform(self, image: CachedImage) -> str:
                time.sleep(0.5)
                return "<svg/>"

        start = time.monotonic()
        discovered = await warm_cache(app, engine=BlockingEngine())
        elapsed = time.monotonic() - start

        assert len(discovered) == 8
        assert len(app.placeholders) == 0
        assert elapsed < 0.4

    async def test_sync_engines_run_concurrently(self) -> None:
        app = App(AppConfig(transform_retry_delay=0))

        @app.route("/")
        def index(ctx):
            return "".join(
                str(image(ctx, f"{n}.png", width=100, height=100, blur=True))
                for n in range(4)
            )

        class BlockingEngine:
            def transform(self, image: CachedImage) -> str:
                time.sleep(0.2)
                return f"<svg data-src=\"{image.src}\"/>"

        start = time.monotonic()
        await warm_cache(app, engine=BlockingEngine())
        elapsed = time.monotonic() - start

        assert len(app.placeholders) == 4
        assert elapsed < 0.6

    async def test_malformed_route_skipped(
        self, engine: FakeEngine, caplog: pytest.LogCaptureFixture
    ) -> None:
        app = App(AppConfig(transform_retry_delay=0))

        @app.route("/")
        def index(ctx):
            return str(image(ctx, "hero.png", width=800, height=600, blur=True))

        @app.route("/legacy/<slug>")
        def legacy(slug):
            return slug

        with caplog.at_level(logging.WARNING, logger="pinhole.routing"):
            discovered = await warm_cache(app, engine=engine)

        assert discovered == {HERO_BLUR, HERO_RESIZE}
        assert app.placeholders.keys() == frozenset({HERO_BLUR})
        assert "/legacy/<slug>" in caplog.text


class TestServeTime:
    async def test_warm_placeholder_inlined(self, site: App, engine: FakeEngine) -> None:
        await site.warm_images(engine)
        page = await site.render_path("/")

        payload = site.placeholders.get(HERO_BLUR)
        assert payload is not None
        encoded = base64.b64encode(payload.encode()).decode()
        assert f"data:image/svg+xml;base64,{encoded}" in page
        assert html.escape(encode(HERO_RESIZE)) in page

    async def test_cold_placeholder_fetched(self, site: App) -> None:
        page = await site.render_path("/")
        assert html.escape(encode(HERO_BLUR)) in page
        assert "data:image/svg+xml" not in page

    async def test_dynamic_route_falls_back(self, site: App, engine: FakeEngine) -> None:
        await site.warm_images(engine)
        page = await site.render_path("/posts/summer")
        blur = CachedImage.blur("posts/summer.png")
        assert html.escape(encode(blur)) in page


class TestGeneratePlaceholder:
    async def test_returns_payload(self, engine: FakeEngine) -> None:
        svg = await generate_placeholder(engine, HERO_BLUR)
        assert svg.startswith("<svg")

    async def test_raises_after_retries(self) -> None:
        engine = FakeEngine(fail={"hero.png": -1})
        with pytest.raises(TransformError) as exc_info:
            await generate_placeholder(engine, HERO_BLUR, retries=2, delay=0)
        assert exc_info.value.image == HERO_BLUR
        assert isinstance(exc_info.value.cause, OSError)
        assert len(engine.calls) == 3

    async def test_rejects_non_text_payload(self) -> None:
        class BadEngine:
            def transform(self, image: CachedImage) -> object:
                return 42

        with pytest.raises(TransformError):
            await generate_placeholder(BadEngine(), HERO_BLUR, retries=0)  # type: ignore[arg-type]
