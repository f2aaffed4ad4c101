"""htmplx — pages from a directory of template fragments.

Maps request paths onto a directory tree. Directories are path
segments (``{regex}`` directories match dynamic segments), and the
``*.html.tmpl`` files along the way are composed into one HTML page.
Files with an extension are served as static assets.

Basic usage::

    from htmplx import Handler

    app = Handler.for_directory("public")

With path captures in the render context::

    from htmplx import Handler, RequestDataMap

    app = Handler.for_directory("public").with_data(
        lambda request: RequestDataMap(site="Example"),
    )
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "DirEntryWithSubmatches",
    "DirFS",
    "FileInfo",
    "FileSystem",
    "HTTPError",
    "Handler",
    "HandlerConfig",
    "HtmplxError",
    "KeyValuePair",
    "MalformedError",
    "MemoryFS",
    "MethodNotAllowed",
    "NotFound",
    "PathExpressionSubmatches",
    "ReadError",
    "Request",
    "RequestData",
    "RequestDataMap",
    "Response",
    "configure_logging",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import htmplx`` fast while providing a clean top-level API.
    """
    if name == "Handler":
        from htmplx.handler import Handler

        return Handler

    if name == "HandlerConfig":
        from htmplx.config import HandlerConfig

        return HandlerConfig

    if name in ("DirFS", "FileInfo", "FileSystem", "MemoryFS"):
        from htmplx import fs as _fs

        return getattr(_fs, name)

    if name in (
        "DirEntryWithSubmatches",
        "KeyValuePair",
        "PathExpressionSubmatches",
        "RequestData",
        "RequestDataMap",
    ):
        from htmplx import data as _data

        return getattr(_data, name)

    if name == "Request":
        from htmplx.http.request import Request

        return Request

    if name == "Response":
        from htmplx.http.response import Response

        return Response

    if name == "configure_logging":
        from htmplx.log import configure_logging

        return configure_logging

    if name in (
        "ConfigurationError",
        "HTTPError",
        "HtmplxError",
        "MalformedError",
        "MethodNotAllowed",
        "NotFound",
        "ReadError",
    ):
        from htmplx import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
