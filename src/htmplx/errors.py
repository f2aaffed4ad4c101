"""htmplx exception hierarchy.

Shared across the matcher, assembler, and handler so every module
raises and catches the same types. The handler maps them to status
codes: ``HTTPError`` carries its own, everything else is a 500.
"""

from dataclasses import dataclass


class HtmplxError(Exception):
    """Base for all htmplx-specific errors."""


class ConfigurationError(HtmplxError):
    """Raised when handler configuration is invalid."""


@dataclass(frozen=True)
class HTTPError(HtmplxError):
    """An error that maps directly to an HTTP status code.

    Raised during resolution. The handler catches these and turns
    them into a bodyless-by-default response with the same status.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — nothing on disk answers the request path.

    Covers unmatched directory segments, missing static files, a
    missing ``body`` fragment along the whole path, the ``404`` marker
    file, and direct requests for template sources.
    """

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — only GET is served.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str] = frozenset({"GET"}), detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class MalformedError(HtmplxError):
    """The template tree itself is broken. Maps to 500."""


class TemplateParseError(MalformedError):
    """A ``*.html.tmpl`` file failed to parse."""

    def __init__(self, name: str, path: str, reason: str) -> None:
        self.name = name
        self.path = path
        super().__init__(f"failed to parse template {name!r} ({path}): {reason}")


class PatternDirectoryError(MalformedError):
    """A ``{regex}`` directory name does not compile."""

    def __init__(self, directory: str, reason: str) -> None:
        self.directory = directory
        super().__init__(f"invalid regex directory name {directory!r}: {reason}")


class EmptyFragmentNameError(MalformedError):
    """A template file is named exactly the template suffix."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"template file found without name: {path}")


class ReadError(HtmplxError):
    """A filesystem operation failed for a reason other than not-exist.

    Always chained from the underlying ``OSError``. Maps to 500.
    """

    def __init__(self, operation: str, path: str) -> None:
        self.operation = operation
        self.path = path
        super().__init__(f"failed to {operation} {path}")
