"""Immutable HTTP request.

Frozen metadata. htmplx only serves GET, so the body is never read.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any
from urllib.parse import parse_qs


def _empty() -> Mapping[str, Any]:
    return MappingProxyType({})


def _headers(raw: Any) -> Mapping[str, str]:
    # header names are lowercased, repeated headers are comma-joined
    headers: dict[str, str] = {}
    for name, value in raw:
        key = name.decode("latin-1").lower()
        text = value.decode("latin-1")
        headers[key] = f"{headers[key]}, {text}" if key in headers else text
    return MappingProxyType(headers)


def _query(query_string: str) -> Mapping[str, tuple[str, ...]]:
    parsed = parse_qs(query_string, keep_blank_values=True)
    return MappingProxyType({k: tuple(v) for k, v in parsed.items()})


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Handed to data and globals factories so render contexts can depend
    on the path, query string, or headers.

    ``headers`` maps lowercase names to values. ``query`` maps each
    parameter to all of its values, in order.
    """

    method: str
    path: str
    query_string: str = ""
    headers: Mapping[str, str] = field(default_factory=_empty)
    query: Mapping[str, tuple[str, ...]] = field(default_factory=_empty)
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    @property
    def segments(self) -> tuple[str, ...]:
        """Non-empty path segments. ``/a/b/`` and ``/a/b`` are the same."""
        return tuple(part for part in self.path.split("/") if part)

    @property
    def url(self) -> str:
        """Full request URL (path + query string)."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path

    def param(self, name: str, default: str | None = None) -> str | None:
        """First value of query parameter *name*, or *default*."""
        values = self.query.get(name)
        return values[0] if values else default

    @classmethod
    def from_asgi(cls, scope: dict[str, Any]) -> Request:
        """Create a Request from an ASGI scope."""
        server = scope.get("server")
        client = scope.get("client")
        query_string = scope.get("query_string", b"").decode("latin-1")
        return cls(
            method=scope["method"],
            path=scope["path"],
            query_string=query_string,
            headers=_headers(scope.get("headers", ())),
            query=_query(query_string),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
        )

    @classmethod
    def get(cls, path: str) -> Request:
        """A bare GET request for *path*, e.g. for rendering outside ASGI."""
        path, _, query_string = path.partition("?")
        return cls(method="GET", path=path, query_string=query_string, query=_query(query_string))
