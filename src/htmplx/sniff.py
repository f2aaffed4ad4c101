"""Content type detection for static files.

The extension decides whenever ``mimetypes`` knows it. Otherwise the
first bytes of the file are inspected with the WHATWG MIME sniffing
signatures (https://mimesniff.spec.whatwg.org/), falling back to
``text/plain`` for text-looking data and ``application/octet-stream``
for everything else.

Sniffing consumes bytes from the stream; ``sniff_stream`` returns them
so the caller can send them ahead of the rest of the file.
"""

import mimetypes
from dataclasses import dataclass
from typing import BinaryIO

SNIFF_LENGTH = 512

TEXT_PLAIN = "text/plain; charset=utf-8"
OCTET_STREAM = "application/octet-stream"

# Leading whitespace skipped before HTML/XML signatures
_WHITESPACE = b"\t\n\x0c\r "

# Bytes that never occur in text
_BINARY = frozenset([*range(0x00, 0x09), 0x0B, *range(0x0E, 0x1B), *range(0x1C, 0x20)])


@dataclass(frozen=True, slots=True)
class _Exact:
    sig: bytes
    content_type: str

    def match(self, data: bytes, first_non_ws: int) -> str | None:
        return self.content_type if data.startswith(self.sig) else None


@dataclass(frozen=True, slots=True)
class _Masked:
    mask: bytes
    pattern: bytes
    content_type: str
    skip_ws: bool = False

    def match(self, data: bytes, first_non_ws: int) -> str | None:
        if self.skip_ws:
            data = data[first_non_ws:]
        if len(data) < len(self.pattern):
            return None
        for pattern_byte, mask_byte, data_byte in zip(self.pattern, self.mask, data, strict=False):
            if data_byte & mask_byte != pattern_byte:
                return None
        return self.content_type


@dataclass(frozen=True, slots=True)
class _HTMLTag:
    """An HTML tag (or comment opener) followed by space or ``>``."""

    sig: bytes

    def match(self, data: bytes, first_non_ws: int) -> str | None:
        data = data[first_non_ws:]
        if len(data) < len(self.sig) + 1:
            return None
        if data[: len(self.sig)].upper() != self.sig:
            return None
        if data[len(self.sig)] not in b" >":
            return None
        return "text/html; charset=utf-8"


@dataclass(frozen=True, slots=True)
class _MP4:
    def match(self, data: bytes, first_non_ws: int) -> str | None:
        if len(data) < 12:
            return None
        box_size = int.from_bytes(data[:4], "big")
        if len(data) < box_size or box_size % 4 != 0 or data[4:8] != b"ftyp":
            return None
        for start in range(8, box_size, 4):
            if start == 12:
                # minor version number
                continue
            if data[start : start + 3] == b"mp4":
                return "video/mp4"
        return None


@dataclass(frozen=True, slots=True)
class _Text:
    def match(self, data: bytes, first_non_ws: int) -> str | None:
        if any(b in _BINARY for b in data[first_non_ws:]):
            return None
        return TEXT_PLAIN


_FF4 = b"\xff\xff\xff\xff"
_RIFF_MASK = _FF4 + b"\x00\x00\x00\x00" + _FF4

_SIGNATURES = (
    *(
        _HTMLTag(tag)
        for tag in (
            b"<!DOCTYPE HTML",
            b"<HTML",
            b"<HEAD",
            b"<SCRIPT",
            b"<IFRAME",
            b"<H1",
            b"<DIV",
            b"<FONT",
            b"<TABLE",
            b"<A",
            b"<STYLE",
            b"<TITLE",
            b"<B",
            b"<BODY",
            b"<BR",
            b"<P",
            b"<!--",
        )
    ),
    _Masked(b"\xff\xff\xff\xff\xff", b"<?xml", "text/xml; charset=utf-8", skip_ws=True),
    _Exact(b"%PDF-", "application/pdf"),
    _Exact(b"%!PS-Adobe-", "application/postscript"),
    # byte order marks
    _Masked(b"\xff\xff\x00\x00", b"\xfe\xff\x00\x00", "text/plain; charset=utf-16be"),
    _Masked(b"\xff\xff\x00\x00", b"\xff\xfe\x00\x00", "text/plain; charset=utf-16le"),
    _Masked(b"\xff\xff\xff\x00", b"\xef\xbb\xbf\x00", "text/plain; charset=utf-8"),
    # images
    _Exact(b"\x00\x00\x01\x00", "image/x-icon"),
    _Exact(b"\x00\x00\x02\x00", "image/x-icon"),
    _Exact(b"BM", "image/bmp"),
    _Exact(b"GIF87a", "image/gif"),
    _Exact(b"GIF89a", "image/gif"),
    _Masked(_RIFF_MASK + b"\xff\xff", b"RIFF\x00\x00\x00\x00WEBPVP", "image/webp"),
    _Exact(b"\x89PNG\r\n\x1a\n", "image/png"),
    _Exact(b"\xff\xd8\xff", "image/jpeg"),
    # audio and video
    _Masked(_RIFF_MASK, b"FORM\x00\x00\x00\x00AIFF", "audio/aiff"),
    _Masked(b"\xff\xff\xff", b"ID3", "audio/mpeg"),
    _Masked(b"\xff\xff\xff\xff\xff", b"OggS\x00", "application/ogg"),
    _Masked(b"\xff\xff\xff\xff\xff\xff\xff\xff", b"MThd\x00\x00\x00\x06", "audio/midi"),
    _Masked(_RIFF_MASK, b"RIFF\x00\x00\x00\x00AVI ", "video/avi"),
    _Masked(_RIFF_MASK, b"RIFF\x00\x00\x00\x00WAVE", "audio/wave"),
    _MP4(),
    _Exact(b"\x1a\x45\xdf\xa3", "video/webm"),
    # fonts
    _Masked(
        b"\x00" * 34 + b"\xff\xff",
        b"\x00" * 34 + b"LP",
        "application/vnd.ms-fontobject",
    ),
    _Exact(b"\x00\x01\x00\x00", "font/ttf"),
    _Exact(b"OTTO", "font/otf"),
    _Exact(b"ttcf", "font/collection"),
    _Exact(b"wOFF", "font/woff"),
    _Exact(b"wOF2", "font/woff2"),
    # archives
    _Exact(b"\x1f\x8b\x08", "application/x-gzip"),
    _Exact(b"PK\x03\x04", "application/zip"),
    _Exact(b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    _Exact(b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    _Exact(b"\x00asm", "application/wasm"),
    _Text(),
)


def detect_content_type(data: bytes) -> str:
    """Sniff a content type from (at most) the first 512 bytes of *data*.

    Always returns a valid MIME type.
    """
    data = data[:SNIFF_LENGTH]

    first_non_ws = 0
    while first_non_ws < len(data) and data[first_non_ws] in _WHITESPACE:
        first_non_ws += 1

    for sig in _SIGNATURES:
        content_type = sig.match(data, first_non_ws)
        if content_type is not None:
            return content_type

    return OCTET_STREAM


def type_by_extension(filename: str) -> str | None:
    """The registered MIME type for *filename*'s extension, if any."""
    content_type, _ = mimetypes.guess_type(filename)
    return content_type


def read_prefix(f: BinaryIO, size: int = SNIFF_LENGTH) -> bytes:
    """Read up to *size* bytes, looping over short reads.

    Stops when the buffer is full or a read returns nothing.
    """
    buf = bytearray()
    while len(buf) < size:
        chunk = f.read(size - len(buf))
        if not chunk:
            break
        buf += chunk
    return bytes(buf)


def sniff_stream(f: BinaryIO, filename: str, size: int = SNIFF_LENGTH) -> tuple[str, bytes]:
    """Content type for an open file, plus any bytes consumed finding it.

    The extension wins when it is known, and nothing is read. Otherwise
    up to *size* bytes are read and sniffed; they are returned so the
    caller can send them before the rest of *f*.
    """
    content_type = type_by_extension(filename)
    if content_type is not None:
        return content_type, b""

    prefix = read_prefix(f, size)
    return detect_content_type(prefix), prefix
