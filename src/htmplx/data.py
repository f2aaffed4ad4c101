"""Path captures and the render-context types that receive them.

Every resolved path segment produces a ``DirEntryWithSubmatches``. The
ordered tuple of them is handed to the per-request render context, if
that context asks for it by subclassing ``RequestData``.

Two ready-made contexts ship:

- ``RequestDataMap`` — a plain dict. Receives the full submatch tuple
  under ``"pathExpressionSubmatches"`` and every named capture under
  its group name.
- ``PathExpressionSubmatches`` — a ``dict[str, str]`` holding only the
  named captures. Subclass it to add your own fields.

Usage::

    handler = Handler.for_directory("public").with_data(
        lambda request: RequestDataMap(user=current_user(request)),
    )

    # public/users/{(?P<user_id>[0-9]+)}/body.html.tmpl
    <h1>User {{ user_id }}</h1>
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from htmplx.fs import FileInfo

SUBMATCHES_KEY = "pathExpressionSubmatches"


@dataclass(frozen=True, slots=True)
class KeyValuePair:
    """One regex capture. ``key`` is empty for unnamed groups."""

    key: str
    value: str


@dataclass(frozen=True, slots=True)
class DirEntryWithSubmatches:
    """A resolved directory plus the captures its name produced.

    Literal directories carry no submatches.
    """

    file: FileInfo
    submatches: tuple[KeyValuePair, ...] = ()

    @property
    def name(self) -> str:
        return self.file.name

    def named(self) -> dict[str, str]:
        """Named captures only, later groups winning on duplicate names."""
        return {kv.key: kv.value for kv in self.submatches if kv.key}

    def values(self) -> tuple[str, ...]:
        return tuple(kv.value for kv in self.submatches)


def iter_named(matches: Sequence[DirEntryWithSubmatches]) -> Iterator[tuple[str, str]]:
    """Yield ``(name, value)`` for every named capture along a path, in order."""
    for match in matches:
        for kv in match.submatches:
            if kv.key:
                yield kv.key, kv.value


class RequestData(ABC):
    """A render context that wants the path captures.

    Subclass it and implement ``set_path_expression_submatches``; the
    handler calls it once per request, after the template tree has been
    resolved and before rendering.
    """

    __slots__ = ()

    @abstractmethod
    def set_path_expression_submatches(self, matches: Sequence[DirEntryWithSubmatches]) -> None:
        """Receive the ordered captures, one entry per path segment."""


class RequestDataMap(dict[str, Any], RequestData):
    """Dict render context with submatches and named captures as keys."""

    def set_path_expression_submatches(self, matches: Sequence[DirEntryWithSubmatches]) -> None:
        self[SUBMATCHES_KEY] = tuple(matches)

        # any named submatches are accessible by name
        for key, value in iter_named(matches):
            self[key] = value


class PathExpressionSubmatches(dict[str, str], RequestData):
    """Named captures only. A base for user-defined context types."""

    def set_path_expression_submatches(self, matches: Sequence[DirEntryWithSubmatches]) -> None:
        for key, value in iter_named(matches):
            self[key] = value


def bind_submatches(data: Any, matches: Sequence[DirEntryWithSubmatches]) -> None:
    """Deliver *matches* to *data* if it is a ``RequestData``."""
    if isinstance(data, RequestData):
        data.set_path_expression_submatches(matches)


def render_namespace(data: Any) -> dict[str, Any]:
    """Turn a render context into the mapping templates see.

    ``None`` becomes an empty namespace. Mappings are used as-is; any
    other object is exposed to templates as ``data``.
    """
    if data is None:
        return {}
    if isinstance(data, Mapping):
        return dict(data)
    return {"data": data}
