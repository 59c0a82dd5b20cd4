"""Immutable request passed to route handlers.

Pinhole renders pages, it does not speak HTTP; a ``Request`` carries the
routing inputs a handler may read (method, path, query, path params).
Crawls build synthetic requests with :meth:`Request.synthetic`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from urllib.parse import parse_qsl


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable request.

    ``synthetic`` is True for requests built by the image crawler so a
    handler can tell a warm-up render from a real one.
    """

    method: str
    path: str
    query: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    path_params: dict[str, str] = field(default_factory=dict)
    synthetic: bool = False

    @classmethod
    def for_path(cls, target: str, *, method: str = "GET") -> Request:
        """Build a request for *target*, which may carry a query string."""
        path, _, query_string = target.partition("?")
        query = MappingProxyType(dict(parse_qsl(query_string)))
        return cls(method=method, path=path or "/", query=query)

    @classmethod
    def synthetic_for(cls, path: str) -> Request:
        """Build the GET request a scoped crawl render targets."""
        return replace(cls.for_path(path), synthetic=True)

    def with_path_params(self, path_params: dict[str, str]) -> Request:
        """Return a copy carrying the params captured by the router."""
        return replace(self, path_params=path_params)
