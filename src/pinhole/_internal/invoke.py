"""Invoke helper — call sync or async callables uniformly.

Route handlers, crawl hooks, data loaders, and transform engines may be
``def`` or ``async def``. Everything that calls user code goes through
:func:`invoke` so the sync/async check lives in exactly one place.

Usage::

    from pinhole._internal.invoke import invoke

    html = await invoke(handler, ctx=ctx)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
