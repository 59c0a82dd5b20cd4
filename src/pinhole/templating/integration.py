"""Kida environment setup and handler-result rendering.

Creates a kida Environment from pinhole's AppConfig and binds the
built-in ``image`` component plus user-registered filters and globals.
The environment is created once during ``App._freeze()``.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import anyio
from kida import ChoiceLoader, Environment, FileSystemLoader

from pinhole.config import AppConfig
from pinhole.images.component import image
from pinhole.templating.returns import InlineTemplate, Template

if TYPE_CHECKING:
    from pinhole.images.context import RenderContext

BUILTIN_GLOBALS: dict[str, Any] = {
    "image": image,
}


def create_environment(
    config: AppConfig,
    filters: dict[str, Callable[..., Any]],
    globals_: dict[str, Any],
) -> Environment:
    """Create a kida Environment from app configuration.

    Supports multiple template directories via ``config.component_dirs``
    for component libraries, partials, and shared templates.
    """
    loaders = [FileSystemLoader(str(config.template_dir))]
    loaders.extend(FileSystemLoader(str(d)) for d in config.component_dirs)

    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=config.autoescape,
        auto_reload=config.debug,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
    )

    if filters:
        env.update_filters(filters)

    for name, value in BUILTIN_GLOBALS.items():
        env.add_global(name, value)

    # User globals may override built-ins
    for name, value in globals_.items():
        env.add_global(name, value)

    return env


async def resolve_context(context: dict[str, Any]) -> dict[str, Any]:
    """Resolve awaitable context values concurrently.

    Lets handlers pass loaders straight into a template::

        return Template("index.html", posts=ctx.load(fetch_posts, default=[]))
    """
    resolved: dict[str, Any] = {}
    pending: dict[str, Awaitable[Any]] = {}

    for key, value in context.items():
        if inspect.isawaitable(value):
            pending[key] = value
        else:
            resolved[key] = value

    if not pending:
        return resolved

    results: dict[str, Any] = {}

    async def _resolve(key: str, awaitable: Awaitable[Any]) -> None:
        results[key] = await awaitable

    async with anyio.create_task_group() as tg:
        for key, awaitable in pending.items():
            tg.start_soon(_resolve, key, awaitable)

    resolved.update(results)
    return resolved


async def render_value(value: Any, env: Environment, ctx: RenderContext) -> str:
    """Render a handler's return value to HTML.

    ``ctx`` is added to every template context under the name ``ctx``
    so components such as ``image`` receive it as an explicit argument::

        {{ image(ctx, "hero.png", width=800, height=600, blur=true) }}
    """
    match value:
        case str():
            return value
        case Template():
            template = env.get_template(value.name)
            return template.render({**await resolve_context(value.context), "ctx": ctx})
        case InlineTemplate():
            template = env.from_string(value.source)
            return template.render({**await resolve_context(value.context), "ctx": ctx})
        case _:
            msg = (
                f"Cannot render {type(value).__name__!r}. "
                "Return str, Template, or InlineTemplate from route handlers."
            )
            raise TypeError(msg)
