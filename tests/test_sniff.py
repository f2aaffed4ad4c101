"""Tests for htmplx.sniff — extension lookup and content sniffing."""

import io

import pytest

from htmplx.sniff import (
    OCTET_STREAM,
    TEXT_PLAIN,
    detect_content_type,
    read_prefix,
    sniff_stream,
    type_by_extension,
)


class TestDetectContentType:
    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            (b"<!DOCTYPE html><html>", "text/html; charset=utf-8"),
            (b"  \n<html lang=en>", "text/html; charset=utf-8"),
            (b"<p>hi</p>", "text/html; charset=utf-8"),
            (b"<!-- note -->", "text/html; charset=utf-8"),
            (b"<?xml version='1.0'?>", "text/xml; charset=utf-8"),
            (b"%PDF-1.7\n", "application/pdf"),
            (b"\x89PNG\r\n\x1a\n\x00\x00", "image/png"),
            (b"\xff\xd8\xff\xe0", "image/jpeg"),
            (b"GIF89a...", "image/gif"),
            (b"RIFF\x10\x00\x00\x00WEBPVP8 ", "image/webp"),
            (b"RIFF\x10\x00\x00\x00WAVEfmt ", "audio/wave"),
            (b"ID3\x03\x00", "audio/mpeg"),
            (b"OggS\x00\x02", "application/ogg"),
            (b"\x1f\x8b\x08\x00", "application/x-gzip"),
            (b"PK\x03\x04\x14\x00", "application/zip"),
            (b"wOF2\x00\x01", "font/woff2"),
            (b"\x00asm\x01\x00\x00\x00", "application/wasm"),
            (b"\xef\xbb\xbfhello", "text/plain; charset=utf-8"),
            (b"plain old text", TEXT_PLAIN),
            (b"", TEXT_PLAIN),
            (b"\x00\x01\x02\x03binary", OCTET_STREAM),
        ],
    )
    def test_signatures(self, data: bytes, expected: str) -> None:
        assert detect_content_type(data) == expected

    def test_html_tag_needs_terminator(self) -> None:
        assert detect_content_type(b"<pre>") == TEXT_PLAIN

    def test_html_tag_case_insensitive(self) -> None:
        assert detect_content_type(b"<HtMl>") == "text/html; charset=utf-8"

    def test_mp4(self) -> None:
        data = b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom"
        assert detect_content_type(data) == "video/mp4"

    def test_only_first_512_bytes(self) -> None:
        data = b"a" * 512 + b"\x00"
        assert detect_content_type(data) == TEXT_PLAIN


class TestTypeByExtension:
    def test_known(self) -> None:
        assert type_by_extension("site.css") == "text/css"
        assert type_by_extension("logo.png") == "image/png"

    def test_unknown(self) -> None:
        assert type_by_extension("notes.zzz-unknown") is None


class TestReadPrefix:
    def test_loops_over_short_reads(self) -> None:
        class Trickle(io.RawIOBase):
            def __init__(self, data: bytes) -> None:
                self._data = data

            def readable(self) -> bool:
                return True

            def read(self, size: int = -1) -> bytes:
                chunk, self._data = self._data[:1], self._data[1:]
                return chunk

        assert read_prefix(Trickle(b"abcdef"), 4) == b"abcd"

    def test_short_file(self) -> None:
        assert read_prefix(io.BytesIO(b"ab"), 512) == b"ab"


class TestSniffStream:
    def test_extension_wins_and_reads_nothing(self) -> None:
        f = io.BytesIO(b"\x89PNG\r\n\x1a\n")
        content_type, prefix = sniff_stream(f, "site.css")
        assert content_type == "text/css"
        assert prefix == b""
        assert f.tell() == 0

    def test_sniffed_prefix_returned(self) -> None:
        data = b"<html>" + b"x" * 1000
        f = io.BytesIO(data)
        content_type, prefix = sniff_stream(f, "page.zzz-unknown")
        assert content_type == "text/html; charset=utf-8"
        assert prefix == data[:512]
        assert prefix + f.read() == data

    def test_custom_size(self) -> None:
        f = io.BytesIO(b"hello world")
        _, prefix = sniff_stream(f, "noext", 5)
        assert prefix == b"hello"
