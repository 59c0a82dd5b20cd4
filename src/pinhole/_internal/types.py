"""Shared type aliases used across pinhole modules."""

from collections.abc import Awaitable, Callable
from typing import Any, TypeAlias

# Route handler — user-defined function with variable signature
Handler: TypeAlias = Callable[..., Any]

# Crawl hook: called once before and once after each scoped render
Hook: TypeAlias = Callable[[], None | Awaitable[None]]
