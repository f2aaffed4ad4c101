"""Translate htmplx responses into ASGI messages.

Pages and errors go out as one body message with a content-length.
Static files go out chunked, one message per chunk.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator, Generator, Iterator

from htmplx._internal.asgi import Send
from htmplx.http.response import Response, StreamingResponse

logger = logging.getLogger("htmplx.server")

# 1xx, 204 and 304 responses never carry a body
_NO_BODY = frozenset({204, 304})


def _body_allowed(status: int) -> bool:
    return status >= 200 and status not in _NO_BODY


def _raw_headers(content_type: str, headers: tuple[tuple[str, str], ...]) -> list[tuple[bytes, bytes]]:
    return [
        (b"content-type", content_type.encode("latin-1")),
        *((name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in headers),
    ]


async def _aiter(chunks: Iterator[bytes] | AsyncIterator[bytes]) -> AsyncGenerator[bytes, None]:
    try:
        if isinstance(chunks, AsyncIterator):
            async for chunk in chunks:
                yield chunk
        else:
            for chunk in chunks:
                yield chunk
    finally:
        if isinstance(chunks, AsyncGenerator):
            await chunks.aclose()
        elif isinstance(chunks, Generator):
            chunks.close()


async def send_response(response: Response, send: Send) -> None:
    """Send *response* as a start message and a single body message."""
    body = response.body_bytes if _body_allowed(response.status) else b""
    headers = _raw_headers(response.content_type, response.headers)
    headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send({"type": "http.response.start", "status": response.status, "headers": headers})
    await send({"type": "http.response.body", "body": body})


async def send_streaming_response(response: StreamingResponse, send: Send) -> None:
    """Send *response* chunk by chunk, then an empty closing body.

    Once the start message is out the status can no longer change, so a
    failure while producing chunks is logged and the body is cut short.
    A failing ``send`` (the client went away) propagates. The chunk
    source is closed either way.
    """
    headers = _raw_headers(response.content_type, response.headers)
    headers.append((b"transfer-encoding", b"chunked"))
    await send({"type": "http.response.start", "status": response.status, "headers": headers})

    body = _aiter(response.chunks)
    try:
        while True:
            try:
                chunk = await anext(body)
            except StopAsyncIteration:
                break
            except Exception:
                logger.exception("response stream failed after headers were sent")
                break
            if chunk:
                await send({"type": "http.response.body", "body": chunk, "more_body": True})
    finally:
        await body.aclose()

    await send({"type": "http.response.body", "body": b"", "more_body": False})
