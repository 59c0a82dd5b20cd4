"""Tests for pinhole.images.cache — write-once placeholder cache."""

import threading

import pytest

from pinhole.images.cache import PlaceholderCache
from pinhole.images.model import CachedImage

HERO = CachedImage.blur("hero.png")


class TestInsert:
    def test_insert_and_get(self) -> None:
        cache = PlaceholderCache()
        assert cache.insert(HERO, "<svg/>") is True
        assert cache.get(HERO) == "<svg/>"
        assert HERO in cache
        assert len(cache) == 1

    def test_lookup_by_equal_key(self) -> None:
        cache = PlaceholderCache()
        cache.insert(HERO, "<svg/>")
        assert cache.get(CachedImage.blur("hero.png")) == "<svg/>"

    def test_miss(self) -> None:
        assert PlaceholderCache().get(HERO) is None

    def test_identical_reinsert_is_noop(self) -> None:
        cache = PlaceholderCache()
        cache.insert(HERO, "<svg/>")
        assert cache.insert(HERO, "<svg/>") is False
        assert cache.snapshot() == {HERO: "<svg/>"}

    def test_first_writer_wins(self) -> None:
        cache = PlaceholderCache()
        cache.insert(HERO, "<svg>first</svg>")
        assert cache.insert(HERO, "<svg>second</svg>") is False
        assert cache.get(HERO) == "<svg>first</svg>"

    def test_rejects_resize_keys(self) -> None:
        cache = PlaceholderCache()
        with pytest.raises(ValueError, match="Only blur"):
            cache.insert(CachedImage.resize("hero.png", 800, 600), "<svg/>")
        assert len(cache) == 0


class TestFreeze:
    def test_new_key_after_freeze_raises(self) -> None:
        cache = PlaceholderCache()
        cache.freeze()
        assert cache.frozen
        with pytest.raises(RuntimeError, match="after warm-up"):
            cache.insert(HERO, "<svg/>")

    def test_existing_key_after_freeze_is_noop(self) -> None:
        cache = PlaceholderCache()
        cache.insert(HERO, "<svg/>")
        cache.freeze()
        assert cache.insert(HERO, "<svg/>") is False

    def test_reads_after_freeze(self) -> None:
        cache = PlaceholderCache()
        cache.insert(HERO, "<svg/>")
        cache.freeze()
        assert cache.get(HERO) == "<svg/>"
        assert cache.keys() == frozenset({HERO})


class TestConcurrentWriters:
    def test_each_key_written_once(self) -> None:
        cache = PlaceholderCache()
        stored: list[bool] = []
        lock = threading.Lock()
        barrier = threading.Barrier(8)

        def writer(n: int) -> None:
            barrier.wait()
            result = cache.insert(HERO, f"<svg>{n}</svg>")
            with lock:
                stored.append(result)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert stored.count(True) == 1
        assert len(cache) == 1
