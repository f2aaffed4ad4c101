"""Path segment to directory matching.

Resolves one URL segment against the children of an already-resolved
directory. A child directory named exactly like the segment always
wins. Otherwise every child named ``{regex}`` is tried; its body is
compiled as a fully anchored Python regular expression and matched
against the segment alone.

    public/
        about/              GET /about      -> about (literal)
        {[a-z]+}/           GET /contact    -> {[a-z]+}
        {(?P<id>[0-9]+)}/   GET /42         -> {(?P<id>[0-9]+)}, id=42

When several pattern directories match, the one capturing the most
values wins. Children are enumerated in name order, so ties go to the
lexically first directory name.

A segment that is itself a pattern name (``/{[a-z]+}``) is rejected
outright: internal routing patterns are never addressable by URL.
"""

import logging
import re

from htmplx.config import HandlerConfig
from htmplx.data import DirEntryWithSubmatches, KeyValuePair
from htmplx.errors import NotFound, PatternDirectoryError, ReadError
from htmplx.fs import FileInfo, FileSystem, join

logger = logging.getLogger("htmplx.matcher")


def is_pattern_name(name: str, config: HandlerConfig) -> bool:
    """Whether *name* is syntactically a pattern directory name."""
    open_, close = config.pattern_open, config.pattern_close
    return (
        len(name) >= len(open_) + len(close) + 1
        and name.startswith(open_)
        and name.endswith(close)
    )


def pattern_body(name: str, config: HandlerConfig) -> str:
    """Strip the delimiters from a pattern directory name."""
    return name[len(config.pattern_open) : len(name) - len(config.pattern_close)]


def compile_pattern(name: str, config: HandlerConfig) -> re.Pattern[str]:
    """Compile a pattern directory name.

    Raises:
        PatternDirectoryError: The body is not a valid regular expression.
    """
    try:
        return re.compile(pattern_body(name, config))
    except re.error as exc:
        raise PatternDirectoryError(name, str(exc)) from exc


def submatches_for(pattern: re.Pattern[str], match: re.Match[str]) -> tuple[KeyValuePair, ...]:
    """One ``KeyValuePair`` per capture group, in group order.

    Groups that did not participate in the match capture ``""``.
    """
    names = {index: name for name, index in pattern.groupindex.items()}
    return tuple(
        KeyValuePair(key=names.get(i, ""), value=match.group(i) or "")
        for i in range(1, pattern.groups + 1)
    )


class DirectoryMatcher:
    """Resolve path segments against directory children.

    Stateless apart from configuration; one instance can serve every
    request concurrently.
    """

    __slots__ = ("_config",)

    def __init__(self, config: HandlerConfig | None = None) -> None:
        self._config = config or HandlerConfig()

    def match(self, scope: FileSystem, segment: str, location: str = ".") -> DirEntryWithSubmatches:
        """Find the child directory of *scope* that answers *segment*.

        Args:
            scope: The parent directory, already resolved.
            segment: One literal URL path segment.
            location: Path of *scope* from the site root, for error messages.

        Returns:
            The matched directory (its real name is ``result.name``) and
            the captures its name produced.

        Raises:
            NotFound: Nothing matches, or the segment is a pattern name.
            PatternDirectoryError: A pattern directory does not compile.
            ReadError: The filesystem failed.
        """
        if is_pattern_name(segment, self._config):
            logger.debug("path includes regex: %s", segment)
            raise NotFound(f"path includes regex: {segment}")

        try:
            info = scope.stat(segment)
        except FileNotFoundError:
            info = None
        except OSError as exc:
            raise ReadError("check directory", join(location, segment)) from exc

        if info is not None:
            if not info.is_dir:
                raise NotFound(f"{segment} is not a directory")
            return DirEntryWithSubmatches(file=info)

        logger.debug("looking up matching regex directories for %s", segment)
        candidates = self.find_matching_pattern_dirs(scope, segment, location)
        if not candidates:
            raise NotFound(f"directory not found: {segment}")

        best = candidates[0]
        for candidate in candidates[1:]:
            if len(candidate.submatches) > len(best.submatches):
                best = candidate

        logger.debug("matching regex directory found: %s", best.name)
        return best

    def find_matching_pattern_dirs(
        self, scope: FileSystem, segment: str, location: str = "."
    ) -> list[DirEntryWithSubmatches]:
        """Every pattern directory in *scope* whose regex matches *segment*.

        Returned in enumeration (name) order.
        """
        entries = self._list(scope, location)

        matching: list[DirEntryWithSubmatches] = []
        for entry in entries:
            if not entry.is_dir or not is_pattern_name(entry.name, self._config):
                continue

            pattern = compile_pattern(entry.name, self._config)
            found = pattern.fullmatch(segment)
            if found is None:
                continue

            submatches = submatches_for(pattern, found)
            logger.debug("regex directory %s matches %s: %s", entry.name, segment, submatches)
            matching.append(DirEntryWithSubmatches(file=entry, submatches=submatches))

        return matching

    def _list(self, scope: FileSystem, location: str) -> list[FileInfo]:
        try:
            return scope.list_dir(".")
        except FileNotFoundError as exc:
            raise NotFound(f"directory vanished during lookup: {location}") from exc
        except OSError as exc:
            raise ReadError("list directory entries of", location) from exc
