"""Pinhole — server-rendered pages with pre-warmed image placeholders.

At startup pinhole renders every static route once, records each image
the pages reference, and pre-generates blur placeholders so the first
visitor gets them inline instead of waiting on a transform.

Basic usage::

    from pinhole import App, Template

    app = App()

    @app.route("/")
    def index():
        return Template("index.html")

    await app.warm_images(engine)
    html = await app.render_path("/")
"""

__version__ = "0.1.0-dev"
__all__ = [
    "App",
    "AppConfig",
    "CachedImage",
    "ConfigurationError",
    "HTTPError",
    "InlineTemplate",
    "MethodNotAllowed",
    "NotFound",
    "PinholeError",
    "RenderContext",
    "RenderError",
    "Request",
    "Template",
    "TransformError",
    "warm_cache",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import pinhole`` fast while providing a clean top-level API.
    """
    if name == "App":
        from pinhole.app import App

        return App

    if name == "AppConfig":
        from pinhole.config import AppConfig

        return AppConfig

    if name == "Request":
        from pinhole.http.request import Request

        return Request

    if name in ("Template", "InlineTemplate"):
        from pinhole.templating import returns as _tmpl

        return getattr(_tmpl, name)

    if name in ("CachedImage", "RenderContext", "warm_cache"):
        from pinhole import images as _images

        return getattr(_images, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "PinholeError",
        "RenderError",
        "TransformError",
    ):
        from pinhole import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
