"""Hierarchical template resolution.

Walks the request path one segment at a time, collecting template
fragments from every directory it passes through::

    public/
        head.html.tmpl                  (root: head and body only)
        body.html.tmpl
        users/
            title.html.tmpl
            {(?P<user_id>[0-9]+)}/
                body.html.tmpl

    GET /users/42  ->  head (root), title (users), body ({...}/),
                       user_id=42

Rules:

- The root contributes only ``head.html.tmpl`` and ``body.html.tmpl``.
- Every resolved directory contributes all of its ``*.html.tmpl`` files
  (not its subdirectories'). A fragment replaces any earlier fragment of
  the same name, so deeper definitions win.
- A ``body`` must be defined somewhere along the path, or the request
  is a 404.
- A file named ``404`` in the final directory forces a 404.

Each level of the descent returns an immutable ``_Descent`` record;
the caller merges it with its own result. Failures are exceptions and
propagate unchanged: a ``NotFound`` raised five levels down is the
``NotFound`` the handler sees.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from htmplx.config import HandlerConfig
from htmplx.data import DirEntryWithSubmatches
from htmplx.errors import EmptyFragmentNameError, NotFound, ReadError, TemplateParseError
from htmplx.fs import FileSystem, join
from htmplx.layout import TemplateSet
from htmplx.matcher import DirectoryMatcher

logger = logging.getLogger("htmplx.assembler")


@dataclass(frozen=True, slots=True)
class Assembly:
    """A successfully resolved path: its templates and its captures."""

    templates: TemplateSet
    submatches: tuple[DirEntryWithSubmatches, ...]


@dataclass(frozen=True, slots=True)
class _Descent:
    body_found: bool
    submatches: tuple[DirEntryWithSubmatches, ...] = ()


class TemplateAssembler:
    """Resolve a segment list to a composed ``TemplateSet``.

    Holds no per-request state; ``assemble`` may be called concurrently.
    """

    __slots__ = ("_config", "_fs", "_matcher")

    def __init__(
        self,
        fs: FileSystem,
        config: HandlerConfig | None = None,
        matcher: DirectoryMatcher | None = None,
    ) -> None:
        self._fs = fs
        self._config = config or HandlerConfig()
        self._matcher = matcher or DirectoryMatcher(self._config)

    def assemble(self, segments: Sequence[str]) -> Assembly:
        """Resolve *segments* against the tree.

        Raises:
            NotFound: A segment matches nothing, no body is defined
                along the path, or the marker file is present.
            MalformedError: A template or pattern directory is broken.
            ReadError: The filesystem failed.
        """
        templates = TemplateSet(self._config)

        root_body = self._load_root(templates)
        descent = self._descend(self._fs, tuple(segments), templates, location=".")

        if not (root_body or descent.body_found):
            raise NotFound("no body defined")

        return Assembly(templates=templates, submatches=descent.submatches)

    # ------------------------------------------------------------------
    # Descent
    # ------------------------------------------------------------------

    def _descend(
        self,
        scope: FileSystem,
        remaining: tuple[str, ...],
        templates: TemplateSet,
        location: str,
    ) -> _Descent:
        if not remaining:
            self._check_marker(scope, location)
            return _Descent(body_found=False)

        entry = self._matcher.match(scope, remaining[0], location)
        child = scope.sub(entry.name)
        child_location = join(location, entry.name)

        defined = self._load_level(child, templates, child_location)
        deeper = self._descend(child, remaining[1:], templates, child_location)

        return _Descent(
            body_found=self._config.body_name in defined or deeper.body_found,
            submatches=(entry, *deeper.submatches),
        )

    def _check_marker(self, scope: FileSystem, location: str) -> None:
        marker = self._config.not_found_marker
        logger.debug("checking for %s file in %s", marker, location)
        try:
            scope.stat(marker)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise ReadError("look up", join(location, marker)) from exc
        raise NotFound(f"{marker} file found in {location}")

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load_root(self, templates: TemplateSet) -> bool:
        """Load ``head`` and ``body`` from the root. True if body exists."""
        found_body = False
        for name, filename in (
            (self._config.head_name, self._config.head_file()),
            (self._config.body_name, self._config.body_file()),
        ):
            source = self._read_source(self._fs, filename, name, filename)
            if source is None:
                logger.debug("%s not found at root", filename)
                continue
            templates.define(name, source, filename)
            if name == self._config.body_name:
                found_body = True
        return found_body

    def _load_level(self, scope: FileSystem, templates: TemplateSet, location: str) -> set[str]:
        """Define every template file directly inside *scope*.

        Returns the fragment names defined at this level.
        """
        suffix = self._config.template_suffix

        try:
            entries = scope.list_dir(".")
        except OSError as exc:
            raise ReadError("look up entries in", location) from exc

        filenames = [e.name for e in entries if not e.is_dir and e.name.endswith(suffix)]
        logger.debug("templates found in %s: %s", location, filenames)

        sources: dict[str, tuple[str, str]] = {}
        for filename in filenames:
            name = filename[: -len(suffix)]
            path = join(location, filename)
            if not name:
                raise EmptyFragmentNameError(path)

            source = self._read_source(scope, filename, name, path)
            if source is None:
                raise NotFound(f"{path} vanished during lookup")
            sources[name] = (source, path)

        for name, (source, path) in sources.items():
            templates.define(name, source, path)

        return set(sources)

    def _read_source(self, scope: FileSystem, filename: str, name: str, path: str) -> str | None:
        """Read a template source. ``None`` if it does not exist."""
        try:
            with scope.open(filename) as f:
                raw = f.read()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise ReadError("read", path) from exc

        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise TemplateParseError(name, path, "source is not valid UTF-8") from exc
