"""Read-only filesystem abstraction.

The resolution engine never touches ``pathlib`` directly. It talks to a
``FileSystem``: open, stat, list immediate children, and scope to a
subdirectory. Two implementations ship:

- ``DirFS`` — a directory on disk.
- ``MemoryFS`` — an in-memory tree, for tests and embedded sites.

Paths are relative and slash-separated; ``"."`` names the scope root.
Anything that is not a valid relative path (absolute, or with empty,
"." or ".." elements) is reported as missing, so a URL segment can
never address anything outside the scope.

Missing entries raise ``FileNotFoundError``. Every other failure is
some other ``OSError`` and is treated as an I/O error by callers.
"""

from __future__ import annotations

import io
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class FileInfo:
    """Metadata for one filesystem entry."""

    name: str
    is_dir: bool
    size: int = 0
    modified: float = 0.0


@runtime_checkable
class FileSystem(Protocol):
    """The four operations the resolution engine needs.

    Implementations must tolerate concurrent reads from several
    in-flight requests without external locking.
    """

    def open(self, path: str) -> BinaryIO: ...
    def stat(self, path: str) -> FileInfo: ...
    def list_dir(self, path: str = ".") -> list[FileInfo]: ...
    def sub(self, path: str) -> FileSystem: ...


def is_valid_path(path: str) -> bool:
    """Whether *path* is a clean, relative, slash-separated path."""
    if path == ".":
        return True
    if not path or "\x00" in path:
        return False
    return all(part not in ("", ".", "..") for part in path.split("/"))


def join(*parts: str) -> str:
    """Join path elements, dropping ``"."`` and empty parts."""
    cleaned = [p for p in parts if p and p != "."]
    return "/".join(cleaned) or "."


def _not_found(path: str) -> FileNotFoundError:
    return FileNotFoundError(2, "No such file or directory", path)


# ---------------------------------------------------------------------------
# On-disk
# ---------------------------------------------------------------------------


class DirFS:
    """A ``FileSystem`` rooted at a directory on disk.

    Usage::

        fs = DirFS("./public")
        with fs.open("css/site.css") as f:
            ...
    """

    __slots__ = ("_root",)

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    def __repr__(self) -> str:
        return f"DirFS({str(self._root)!r})"

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, path: str) -> Path:
        if not is_valid_path(path):
            raise _not_found(path)
        if path == ".":
            return self._root
        return self._root / path

    def open(self, path: str) -> BinaryIO:
        full = self._resolve(path)
        if full.is_dir():
            raise IsADirectoryError(21, "Is a directory", path)
        try:
            return full.open("rb")
        except NotADirectoryError as exc:
            raise _not_found(path) from exc

    def stat(self, path: str) -> FileInfo:
        full = self._resolve(path)
        try:
            st = full.stat()
        except NotADirectoryError as exc:
            raise _not_found(path) from exc
        return FileInfo(
            name=full.name if path != "." else ".",
            is_dir=full.is_dir(),
            size=st.st_size,
            modified=st.st_mtime,
        )

    def list_dir(self, path: str = ".") -> list[FileInfo]:
        full = self._resolve(path)
        entries: list[FileInfo] = []
        with os.scandir(full) as it:
            for entry in it:
                try:
                    st = entry.stat()
                except FileNotFoundError:
                    # dangling symlink, or removed while listing
                    continue
                entries.append(
                    FileInfo(
                        name=entry.name,
                        is_dir=entry.is_dir(),
                        size=st.st_size,
                        modified=st.st_mtime,
                    )
                )
        entries.sort(key=lambda e: e.name)
        return entries

    def sub(self, path: str) -> DirFS:
        return DirFS(self._resolve(path))


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------


class MemoryFS:
    """A ``FileSystem`` backed by a mapping of paths to contents.

    Keys are slash-separated relative paths. Values are file contents
    (``str`` is encoded as UTF-8). A key ending in ``/`` or a ``None``
    value declares a directory; parent directories are implied.

    Usage::

        fs = MemoryFS({
            "body.html.tmpl": "<h1>Home</h1>",
            "{(?P<id>[0-9]+)}/body.html.tmpl": "<p>{{ id }}</p>",
            "empty/": None,
        })
    """

    __slots__ = ("_dirs", "_files", "_prefix")

    def __init__(self, entries: Mapping[str, bytes | str | None] | None = None) -> None:
        files: dict[str, bytes] = {}
        dirs: set[str] = {"."}

        for key, value in (entries or {}).items():
            is_dir = value is None or key.endswith("/")
            path = key.strip("/")
            if not is_valid_path(path):
                raise ValueError(f"invalid MemoryFS path: {key!r}")

            parts = path.split("/")
            for i in range(1, len(parts)):
                dirs.add("/".join(parts[:i]))

            if is_dir:
                dirs.add(path)
            else:
                files[path] = value.encode("utf-8") if isinstance(value, str) else value

        overlap = dirs & files.keys()
        if overlap:
            raise ValueError(f"paths declared as both file and directory: {sorted(overlap)}")

        self._files = files
        self._dirs = dirs
        self._prefix = "."

    @classmethod
    def _view(cls, files: dict[str, bytes], dirs: set[str], prefix: str) -> MemoryFS:
        view = cls.__new__(cls)
        view._files = files
        view._dirs = dirs
        view._prefix = prefix
        return view

    def __repr__(self) -> str:
        return f"MemoryFS(prefix={self._prefix!r}, files={len(self._files)})"

    def _full(self, path: str) -> str:
        if not is_valid_path(path):
            raise _not_found(path)
        return join(self._prefix, path)

    def open(self, path: str) -> BinaryIO:
        full = self._full(path)
        if full in self._dirs:
            raise IsADirectoryError(21, "Is a directory", path)
        try:
            return io.BytesIO(self._files[full])
        except KeyError:
            raise _not_found(path) from None

    def stat(self, path: str) -> FileInfo:
        full = self._full(path)
        name = full.rsplit("/", 1)[-1]
        if full in self._dirs:
            return FileInfo(name=name, is_dir=True)
        if full in self._files:
            return FileInfo(name=name, is_dir=False, size=len(self._files[full]))
        raise _not_found(path)

    def list_dir(self, path: str = ".") -> list[FileInfo]:
        full = self._full(path)
        if full not in self._dirs:
            if full in self._files:
                raise NotADirectoryError(20, "Not a directory", path)
            raise _not_found(path)

        prefix = "" if full == "." else full + "/"
        children: dict[str, FileInfo] = {}
        for d in self._dirs:
            if d != "." and d.startswith(prefix) and "/" not in d[len(prefix) :]:
                name = d[len(prefix) :]
                children[name] = FileInfo(name=name, is_dir=True)
        for f, content in self._files.items():
            if f.startswith(prefix) and "/" not in f[len(prefix) :]:
                name = f[len(prefix) :]
                children[name] = FileInfo(name=name, is_dir=False, size=len(content))
        return [children[name] for name in sorted(children)]

    def sub(self, path: str) -> MemoryFS:
        return MemoryFS._view(self._files, self._dirs, self._full(path))
