"""Tests for htmplx.http.response — Response and StreamingResponse."""

import pytest

from htmplx.http.response import HTML, Response, StreamingResponse


class TestResponse:
    def test_defaults(self) -> None:
        r = Response()
        assert r.body == ""
        assert r.status == 200
        assert r.content_type == HTML
        assert r.headers == ()

    def test_with_header_returns_new_object(self) -> None:
        r1 = Response("x")
        r2 = r1.with_header("Allow", "GET").with_header("X-Extra", "1")
        assert r1.headers == ()
        assert r2.headers == (("Allow", "GET"), ("X-Extra", "1"))

    def test_body_bytes(self) -> None:
        assert Response("héllo").body_bytes == "héllo".encode()
        assert Response(b"raw").body_bytes == b"raw"

    def test_text(self) -> None:
        assert Response(b"abc").text == "abc"
        assert Response("abc").text == "abc"

    def test_header_lookup_case_insensitive(self) -> None:
        r = Response().with_header("allow", "GET")
        assert r.header("Allow") == "GET"
        assert r.header("X-Missing") is None

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            Response().status = 500  # type: ignore[misc]


class TestStreamingResponse:
    def test_defaults(self) -> None:
        r = StreamingResponse(chunks=iter([b"a"]))
        assert r.status == 200
        assert r.content_type == "application/octet-stream"
        assert r.headers == ()
