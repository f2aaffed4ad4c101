"""Tests for htmplx.data — submatch delivery and render namespaces."""

from dataclasses import dataclass

import pytest

from htmplx.data import (
    SUBMATCHES_KEY,
    DirEntryWithSubmatches,
    KeyValuePair,
    PathExpressionSubmatches,
    RequestData,
    RequestDataMap,
    bind_submatches,
    iter_named,
    render_namespace,
)
from htmplx.fs import FileInfo


def _entry(name: str, *pairs: tuple[str, str]) -> DirEntryWithSubmatches:
    return DirEntryWithSubmatches(
        file=FileInfo(name=name, is_dir=True),
        submatches=tuple(KeyValuePair(k, v) for k, v in pairs),
    )


MATCHES = (
    _entry("users"),
    _entry("{(?P<user_id>[0-9]+)}", ("user_id", "42")),
    _entry("{(?P<slug>[a-z]+)-([0-9]+)}", ("slug", "post"), ("", "7")),
)


class TestDirEntryWithSubmatches:
    def test_name(self) -> None:
        assert MATCHES[1].name == "{(?P<user_id>[0-9]+)}"

    def test_named_skips_unnamed(self) -> None:
        assert MATCHES[2].named() == {"slug": "post"}

    def test_values(self) -> None:
        assert MATCHES[2].values() == ("post", "7")

    def test_literal_has_none(self) -> None:
        assert MATCHES[0].submatches == ()

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            MATCHES[0].submatches = ()  # type: ignore[misc]


class TestIterNamed:
    def test_in_path_order(self) -> None:
        assert list(iter_named(MATCHES)) == [("user_id", "42"), ("slug", "post")]

    def test_duplicate_names_yield_both(self) -> None:
        matches = (_entry("{(?P<id>.+)}", ("id", "a")), _entry("{(?P<id>.+)}", ("id", "b")))
        assert list(iter_named(matches)) == [("id", "a"), ("id", "b")]


class TestRequestDataMap:
    def test_receives_tuple_and_names(self) -> None:
        data = RequestDataMap(site="Example")
        data.set_path_expression_submatches(MATCHES)
        assert data[SUBMATCHES_KEY] == MATCHES
        assert data["user_id"] == "42"
        assert data["slug"] == "post"
        assert data["site"] == "Example"

    def test_later_capture_wins(self) -> None:
        data = RequestDataMap()
        data.set_path_expression_submatches(
            (_entry("{(?P<id>.+)}", ("id", "a")), _entry("{(?P<id>.+)}", ("id", "b")))
        )
        assert data["id"] == "b"

    def test_capture_overrides_existing_key(self) -> None:
        data = RequestDataMap(user_id="preset")
        data.set_path_expression_submatches(MATCHES)
        assert data["user_id"] == "42"

    def test_is_request_data(self) -> None:
        assert isinstance(RequestDataMap(), RequestData)


class TestPathExpressionSubmatches:
    def test_names_only(self) -> None:
        data = PathExpressionSubmatches()
        data.set_path_expression_submatches(MATCHES)
        assert data == {"user_id": "42", "slug": "post"}
        assert SUBMATCHES_KEY not in data

    def test_subclass_keeps_fields(self) -> None:
        class PageData(PathExpressionSubmatches):
            @property
            def title(self) -> str:
                return f"User {self['user_id']}"

        data = PageData()
        data.set_path_expression_submatches(MATCHES)
        assert data.title == "User 42"


class TestBindSubmatches:
    def test_custom_request_data(self) -> None:
        @dataclass
        class Context(RequestData):
            received: tuple = ()

            def set_path_expression_submatches(self, matches) -> None:
                self.received = tuple(matches)

        context = Context()
        bind_submatches(context, MATCHES)
        assert context.received == MATCHES

    def test_plain_dict_untouched(self) -> None:
        data: dict = {"a": 1}
        bind_submatches(data, MATCHES)
        assert data == {"a": 1}

    def test_none(self) -> None:
        bind_submatches(None, MATCHES)

    def test_abstract(self) -> None:
        with pytest.raises(TypeError):
            RequestData()  # type: ignore[abstract]


class TestRenderNamespace:
    def test_none_is_empty(self) -> None:
        assert render_namespace(None) == {}

    def test_mapping_copied(self) -> None:
        data = RequestDataMap(a=1)
        namespace = render_namespace(data)
        assert namespace == {"a": 1}
        assert type(namespace) is dict

    def test_object_exposed_as_data(self) -> None:
        obj = object()
        assert render_namespace(obj) == {"data": obj}
