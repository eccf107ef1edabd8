"""Tests for ruletype.typescript -- union and generic handling on type strings."""

from __future__ import annotations

from ruletype.typescript import (
    apply_nullability,
    format_property_name,
    has_null,
    is_ambiguous,
    join_union,
    quote_literal,
    referenced_types,
    split_top_level,
    split_union,
    strip_null,
    unwrap_array,
)


class TestSplitTopLevel:
    def test_splits_plain_union(self) -> None:
        assert split_union("string | null") == ["string", "null"]

    def test_ignores_separator_inside_generics(self) -> None:
        assert split_union("Array<string | null> | number") == ["Array<string | null>", "number"]

    def test_ignores_separator_inside_quotes(self) -> None:
        assert split_union("'a|b' | 'c'") == ["'a|b'", "'c'"]

    def test_escaped_quote_does_not_close_literal(self) -> None:
        assert split_top_level("'it\\'s, ok', x", ",") == ["'it\\'s, ok'", " x"]

    def test_text_without_separator_is_single_part(self) -> None:
        assert split_top_level("Record<string, unknown>", ",") == ["Record<string, unknown>"]


class TestNullHandling:
    def test_strip_null_from_union(self) -> None:
        assert strip_null("string | null") == "string"

    def test_strip_null_keeps_nested_null(self) -> None:
        assert strip_null("Array<string | null>") == "Array<string | null>"

    def test_null_only_union_becomes_unknown(self) -> None:
        assert strip_null("null | null") == "unknown"

    def test_non_union_is_unchanged(self) -> None:
        assert strip_null("null") == "null"

    def test_apply_nullability_appends_once(self) -> None:
        assert apply_nullability("number", True) == "number | null"
        assert apply_nullability("number | null", True) == "number | null"

    def test_apply_nullability_noop_when_not_nullable(self) -> None:
        assert apply_nullability("number", False) == "number"

    def test_has_null_is_top_level_only(self) -> None:
        assert has_null("string | null")
        assert not has_null("Array<null>")


class TestMisc:
    def test_join_union_dedupes_in_order(self) -> None:
        assert join_union(["b", "a", "b"]) == "b | a"

    def test_is_ambiguous(self) -> None:
        assert is_ambiguous(None)
        assert is_ambiguous("Array<unknown>")
        assert is_ambiguous("any")
        assert not is_ambiguous("Array<string>")

    def test_unwrap_array(self) -> None:
        assert unwrap_array("Array<Array<Tag>>") == "Array<Tag>"
        assert unwrap_array("Array<A> | Array<B>") is None
        assert unwrap_array("string") is None

    def test_quote_literal_escapes(self) -> None:
        assert quote_literal("it's") == "'it\\'s'"

    def test_format_property_name(self) -> None:
        assert format_property_name("user_id") == "user_id"
        assert format_property_name("items.*.id") == "'items.*.id'"

    def test_referenced_types_skips_literals_and_builtins(self) -> None:
        assert referenced_types("Array<TagResource> | 'Draft' | null") == ["TagResource"]
        assert referenced_types("Record<string, UserData>") == ["UserData"]
        assert referenced_types("File | string") == []
