"""Pinhole application class.

Mutable during setup (route registration, filters, globals, hooks).
Frozen when the first page is rendered or the image cache is warmed.
"""

from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from kida import Environment

from pinhole._internal.invoke import invoke
from pinhole._internal.types import Handler, Hook
from pinhole.config import AppConfig
from pinhole.errors import ConfigurationError
from pinhole.http.request import Request
from pinhole.images.cache import PlaceholderCache
from pinhole.images.context import RenderContext
from pinhole.routing.route import Route, RouteMatch
from pinhole.routing.router import Router, convert_param, parse_path
from pinhole.templating.integration import (
    BUILTIN_GLOBALS,
    create_environment,
    render_value,
)

if TYPE_CHECKING:
    from pinhole.images.model import CachedImage
    from pinhole.images.transform import TransformEngine

logger = logging.getLogger("pinhole.routing")


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    path: str
    handler: Handler
    methods: list[str] | None
    name: str | None


class App:
    """The pinhole application.

    Owns the route table, the kida environment, and the placeholder
    cache that warm-up fills and page renders read.

    Usage::

        app = App()

        @app.route("/")
        def index():
            return Template.inline(
                '{{ image(ctx, "hero.png", width=800, height=600, blur=true) }}'
            )

        await app.warm_images(engine)
        html = await app.render_path("/")

    Thread safety:
        Setup is single-threaded (decorators at import time). The freeze
        transition uses a Lock + double-check so exactly one thread
        compiles the app.
    """

    __slots__ = (
        "_custom_kida_env",
        "_freeze_lock",
        "_frozen",
        "_kida_env",
        "_pending_routes",
        "_placeholders",
        "_router",
        "_startup_hooks",
        "_template_filters",
        "_template_globals",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        kida_env: Environment | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pending_routes: list[_PendingRoute] = []
        self._template_filters: dict[str, Callable[..., Any]] = {}
        self._template_globals: dict[str, Any] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._custom_kida_env: Environment | None = kida_env
        self._placeholders: PlaceholderCache = PlaceholderCache()

        # Compiled state — set during _freeze()
        self._router: Router | None = None
        self._kida_env: Environment | None = None

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path pattern. Use ``{param}`` for path parameters.
                Routes with parameters are served but never crawled for
                images.
            methods: HTTP methods. Defaults to ``["GET"]``.
            name: Optional route name.

        Handlers receive arguments by parameter name: ``ctx`` (the
        :class:`RenderContext`), ``request``, and any path parameter.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(_PendingRoute(path, func, methods, name))
            return func

        return decorator

    # -- Template integration --

    def template_filter(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template filter."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_filters[name or func.__name__] = func
            return func

        return decorator

    def template_global(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template global."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_globals[name or func.__name__] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order from :meth:`startup`, before the
        app serves pages. Warming the image cache belongs here::

            @app.on_startup
            async def warm():
                await app.warm_images(engine)
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    async def startup(self) -> None:
        """Freeze the app and run the startup hooks."""
        self._ensure_frozen()
        for hook in self._startup_hooks:
            await invoke(hook)

    # -- Introspection --

    @property
    def routes(self) -> list[Route]:
        """The compiled route table, in registration order."""
        self._ensure_frozen()
        assert self._router is not None
        return self._router.routes

    @property
    def placeholders(self) -> PlaceholderCache:
        """Blur placeholders generated by warm-up."""
        return self._placeholders

    # -- Rendering --

    async def render(self, ctx: RenderContext) -> str:
        """Render the page at ``ctx.request.path`` to HTML.

        This is the single entry point both crawls and real requests go
        through. It may be called any number of times.

        Raises ``NotFound`` / ``MethodNotAllowed`` when no route handles
        the request.
        """
        self._ensure_frozen()
        assert self._router is not None
        assert self._kida_env is not None

        request = ctx.request
        match = self._router.match(request.method, request.path)
        ctx = ctx.with_request(request.with_path_params(match.path_params))
        kwargs = _build_handler_kwargs(match, ctx)
        result = await invoke(match.route.handler, **kwargs)
        return await render_value(result, self._kida_env, ctx)

    async def render_path(self, target: str) -> str:
        """Render *target* as a real request, reading the placeholder cache."""
        ctx = RenderContext.for_serve(
            Request.for_path(target), self._placeholders, self.config
        )
        return await self.render(ctx)

    async def warm_images(
        self,
        engine: TransformEngine,
        routes: Sequence[Route] | None = None,
        *,
        before: Hook | None = None,
        after: Hook | None = None,
    ) -> set[CachedImage]:
        """Crawl static routes and pre-generate blur placeholders.

        See :func:`pinhole.images.warmup.warm_cache`.
        """
        from pinhole.images.warmup import warm_cache

        return await warm_cache(
            self, routes, engine=engine, before=before, after=after
        )

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        router = Router()
        for pending in self._pending_routes:
            methods = frozenset(m.upper() for m in (pending.methods or ["GET"]))
            route = Route(
                path=pending.path,
                handler=pending.handler,
                methods=methods,
                name=pending.name,
            )
            try:
                router.add(route)
            except ConfigurationError as exc:
                logger.warning("Skipping route %r: %s", pending.path, exc)
        router.compile()
        self._router = router

        if self._custom_kida_env is not None:
            self._kida_env = self._custom_kida_env
            if self._template_filters:
                self._kida_env.update_filters(self._template_filters)
            for name, value in {**BUILTIN_GLOBALS, **self._template_globals}.items():
                self._kida_env.add_global(name, value)
        else:
            self._kida_env = create_environment(
                self.config,
                self._template_filters,
                self._template_globals,
            )

        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started rendering. "
                "Register routes, filters, and hooks before warm-up or the first render."
            )
            raise RuntimeError(msg)


def _build_handler_kwargs(match: RouteMatch, ctx: RenderContext) -> dict[str, Any]:
    """Build handler keyword arguments from the handler signature.

    ``ctx`` and ``request`` are matched by name; path parameters by name,
    converted with the converter declared in the route path
    (``{id:int}``).
    """
    converters = {
        seg.param_name: seg.param_type
        for seg in parse_path(match.route.path)
        if seg.is_param
    }
    sig = inspect.signature(match.route.handler)
    kwargs: dict[str, Any] = {}
    for name in sig.parameters:
        if name == "ctx":
            kwargs[name] = ctx
        elif name == "request":
            kwargs[name] = ctx.request
        elif name in match.path_params:
            kwargs[name] = convert_param(match.path_params[name], converters[name])
    return kwargs
