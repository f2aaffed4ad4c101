"""The htmplx ASGI application.

Maps every GET request onto a directory tree:

- ``/css/site.css`` (last segment has an extension) is a static file,
  streamed with an extension-derived or sniffed content type.
- ``/users/42`` (no extension) is a page, composed from the template
  fragments along the path and rendered into the layout skeleton.
- ``/body.html.tmpl`` (template extension) is always a 404.

Any method but GET is a 405. One request is one pass through that
decision; nothing is cached between requests.

Blocking filesystem work and rendering run in worker threads via
``anyio.to_thread``, so a slow filesystem delays only its own request.

Usage::

    from htmplx import Handler, RequestDataMap

    app = Handler.for_directory("public").with_data(
        lambda request: RequestDataMap(path=request.path),
    )

    # uvicorn module:app
"""

from __future__ import annotations

import functools
import logging
from collections.abc import AsyncIterator, Callable, Mapping, Sequence
from pathlib import Path
from typing import Any, BinaryIO

import anyio.to_thread

from htmplx._internal.asgi import Receive, Scope, Send
from htmplx._internal.invoke import invoke
from htmplx.assembler import TemplateAssembler
from htmplx.config import HandlerConfig
from htmplx.data import bind_submatches, render_namespace
from htmplx.errors import HTTPError, MethodNotAllowed, NotFound, ReadError
from htmplx.fs import DirFS, FileSystem
from htmplx.http.request import Request
from htmplx.http.response import HTML, AnyResponse, Response, StreamingResponse
from htmplx.server.sender import send_response, send_streaming_response
from htmplx.sniff import sniff_stream

logger = logging.getLogger("htmplx.server")

DataFactory = Callable[[Request], Any]
GlobalsFactory = Callable[[Request], Mapping[str, Any]]

_PLAIN = "text/plain; charset=utf-8"

_REASONS = {
    404: "Not Found",
    405: "Method Not Allowed",
    500: "Internal Server Error",
}


def extension(segment: str) -> str:
    """The suffix from the final dot of *segment*, or ``""``."""
    dot = segment.rfind(".")
    return segment[dot:] if dot >= 0 else ""


class Handler:
    """Serve a template tree as an ASGI 3.0 application.

    Args:
        fs: The site root.
        config: Naming conventions and limits.
        data: Builds the render context for a request. A context that
            subclasses ``RequestData`` receives the path captures.
        globals: Builds per-request template globals; callables become
            template functions.
        filters: Template filters registered for every request.
    """

    __slots__ = ("_assembler", "_config", "_data", "_filters", "_fs", "_globals")

    def __init__(
        self,
        fs: FileSystem,
        config: HandlerConfig | None = None,
        *,
        data: DataFactory | None = None,
        globals: GlobalsFactory | None = None,  # noqa: A002
        filters: Mapping[str, Callable[..., Any]] | None = None,
    ) -> None:
        self._fs = fs
        self._config = config or HandlerConfig()
        self._data = data
        self._globals = globals
        self._filters = dict(filters or {})
        self._assembler = TemplateAssembler(fs, self._config)

    @classmethod
    def for_directory(
        cls,
        directory: str | Path,
        config: HandlerConfig | None = None,
        **kwargs: Any,
    ) -> Handler:
        """Serve the directory *directory* on disk."""
        return cls(DirFS(directory), config, **kwargs)

    def with_data(self, data: DataFactory) -> Handler:
        """Set the render context factory. Returns the handler for chaining."""
        self._data = data
        return self

    def with_globals(self, globals: GlobalsFactory) -> Handler:  # noqa: A002
        """Set the template globals factory. Returns the handler for chaining."""
        self._globals = globals
        return self

    @property
    def config(self) -> HandlerConfig:
        return self._config

    @property
    def fs(self) -> FileSystem:
        return self._fs

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        if scope["type"] != "http":
            return

        response = await self.serve(Request.from_asgi(dict(scope)))

        if isinstance(response, StreamingResponse):
            await send_streaming_response(response, send)
        else:
            await send_response(response, send)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Acknowledge the lifespan protocol; there is nothing to set up."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Request pipeline --

    async def serve(self, request: Request) -> AnyResponse:
        """Answer *request*, mapping every failure to an error response."""
        logger.debug("handling request %s %s", request.method, request.path)
        try:
            response = await self.resolve(request)
        except HTTPError as exc:
            logger.info("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
            return self._error_response(exc)
        except Exception:
            logger.exception("500 %s %s", request.method, request.path)
            return Response(body=_REASONS[500], status=500, content_type=_PLAIN)

        logger.debug("request served %s %s", request.method, request.path)
        return response

    async def resolve(self, request: Request) -> AnyResponse:
        """Answer *request* or raise.

        Raises:
            MethodNotAllowed: The method is not GET.
            NotFound: Nothing in the tree answers the path.
            MalformedError: A template or pattern directory is broken.
            ReadError: The filesystem failed.
        """
        if request.method != "GET":
            raise MethodNotAllowed()

        segments = request.segments

        if segments:
            last = segments[-1]
            ext = extension(last)
            if ext == self._config.hidden_extension or last.endswith(self._config.template_suffix):
                raise NotFound("template sources are not served")
            if ext:
                logger.debug("attempting to serve file %s", request.path)
                return await self._serve_file("/".join(segments))

        html = await self.render_page(request, segments)
        return Response(body=html, content_type=HTML)

    async def render_page(self, request: Request, segments: Sequence[str] | None = None) -> str:
        """Resolve *segments* (default: the request's) and render the page."""
        if segments is None:
            segments = request.segments

        logger.debug("loading templates for %s", list(segments))
        assembly = await anyio.to_thread.run_sync(self._assembler.assemble, segments)

        data = await invoke(self._data, request) if self._data is not None else None
        bind_submatches(data, assembly.submatches)

        globals_ = await invoke(self._globals, request) if self._globals is not None else None

        render = functools.partial(
            assembly.templates.render,
            render_namespace(data),
            filters=self._filters,
            globals_=globals_,
        )
        return await anyio.to_thread.run_sync(render)

    # -- Static files --

    async def _serve_file(self, path: str) -> StreamingResponse:
        f, content_type, prefix = await anyio.to_thread.run_sync(self._open_file, path)
        logger.debug("serving %s as %s", path, content_type)
        return StreamingResponse(
            chunks=self._stream_file(f, prefix),
            content_type=content_type,
        )

    def _open_file(self, path: str) -> tuple[BinaryIO, str, bytes]:
        try:
            f = self._fs.open(path)
        except (FileNotFoundError, IsADirectoryError) as exc:
            raise NotFound(f"file not found: {path}") from exc
        except OSError as exc:
            raise ReadError("look up", path) from exc

        try:
            content_type, prefix = sniff_stream(f, path, self._config.sniff_length)
        except OSError as exc:
            f.close()
            raise ReadError("read", path) from exc

        return f, content_type, prefix

    async def _stream_file(self, f: BinaryIO, prefix: bytes) -> AsyncIterator[bytes]:
        try:
            if prefix:
                yield prefix
            while True:
                chunk = await anyio.to_thread.run_sync(f.read, self._config.chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            f.close()

    # -- Errors --

    def _error_response(self, exc: HTTPError) -> Response:
        body = _REASONS.get(exc.status, f"Error {exc.status}")
        if self._config.debug and exc.detail:
            body = f"{exc.status}: {exc.detail}"

        response = Response(body=body, status=exc.status, content_type=_PLAIN)
        for name, value in exc.headers:
            response = response.with_header(name, value)
        return response
