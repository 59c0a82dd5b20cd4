"""Static path enumeration for the image crawler.

A page behind ``/posts/{slug}`` cannot be rendered without knowing which
slugs exist, so only routes whose path has no variable segment are
crawled. Order follows the route table, so two runs over the same table
visit paths in the same order.
"""

import logging
from collections.abc import Iterable

from pinhole.errors import ConfigurationError
from pinhole.routing.route import Route

logger = logging.getLogger("pinhole.routing")


def static_paths(routes: Iterable[Route]) -> list[str]:
    """Return the statically resolvable GET paths of *routes*.

    Parameterized routes are dropped. Malformed route templates are
    logged and skipped; the remaining routes are still enumerated.
    A path registered more than once appears once, at its first position.
    """
    paths: list[str] = []
    seen: set[str] = set()
    for route in routes:
        if "GET" not in route.methods:
            continue
        try:
            is_static = route.is_static
        except ConfigurationError as exc:
            logger.warning("Skipping route %r: %s", route.path, exc)
            continue
        if not is_static:
            logger.debug("Skipping dynamic route %r", route.path)
            continue
        if route.path in seen:
            continue
        seen.add(route.path)
        paths.append(route.path)
    return paths
