"""Tests for ruletype.rules.definitions and ruletype.rules.synthesizer."""

from __future__ import annotations

import pytest

from ruletype.models import InferredField, MissingSymbols
from ruletype.rules import resolve_rule_definitions, synthesize_fields
from ruletype.rules.objects import EnumValueRule


def _fields(rules: dict, companions: dict | None = None) -> dict[str, InferredField]:
    result = synthesize_fields(rules, companions or {}, MissingSymbols())
    return {f.name: f for f in result}


class TestRuleDefinitions:
    def test_item_rules_fold_into_parent(self) -> None:
        defs = resolve_rule_definitions({"tags": "array", "tags.*": "string|max:20"})
        assert list(defs) == ["tags"]
        assert defs["tags"].array_item_tokens == ["string", "max:20"]

    def test_parent_created_from_item_rules_only(self) -> None:
        defs = resolve_rule_definitions({"name": "required", "ids.*": "integer"})
        assert list(defs) == ["name", "ids"]
        assert defs["ids"].required is False
        assert defs["ids"].nullable is False
        assert defs["ids"].tokens == []

    def test_nested_paths_are_plain_fields(self) -> None:
        defs = resolve_rule_definitions({"items.*.id": "integer"})
        assert list(defs) == ["items.*.id"]
        assert defs["items.*.id"].array_item_tokens is None

    def test_non_string_keys_ignored(self) -> None:
        assert list(resolve_rule_definitions({0: "required", "a": "string"})) == ["a"]


class TestSynthesizeFields:
    def test_sometimes_makes_field_optional(self) -> None:
        fields = _fields({"name": "sometimes|required|string"})
        assert fields["name"].optional is True

    def test_required_field_not_optional(self) -> None:
        assert _fields({"name": "required|string"})["name"].optional is False

    def test_no_null_without_nullable_rule(self) -> None:
        fields = _fields({"nickname": "string"}, {"nickname": "string | null"})
        assert fields["nickname"].type == "string"

    def test_companion_null_stripped_when_used_as_fallback(self) -> None:
        fields = _fields({"birthday": "required"}, {"birthday": "string | null"})
        assert fields["birthday"].type == "string"

    def test_nullable_appends_null(self) -> None:
        assert _fields({"age": "nullable|integer"})["age"].type == "number | null"

    def test_nullable_without_type(self) -> None:
        assert _fields({"note": "nullable"})["note"].type == "unknown | null"

    def test_companion_replaces_ambiguous_rule_type(self) -> None:
        fields = _fields({"ids": "array"}, {"ids": "Array<number>"})
        assert fields["ids"].type == "Array<number>"

    def test_rule_type_beats_specific_companion(self) -> None:
        fields = _fields({"count": "string"}, {"count": "number"})
        assert fields["count"].type == "string"

    def test_missing_type_is_unknown(self) -> None:
        assert _fields({"meta": "present"})["meta"].type == "unknown"

    def test_choice_is_literal_union(self) -> None:
        fields = _fields({"status": "required|in:draft,published"}, {"status": "string"})
        assert fields["status"].type == "'draft' | 'published'"

    def test_enum_object_records_symbol(self) -> None:
        symbols = MissingSymbols()
        result = synthesize_fields(
            {"role": ["required", EnumValueRule("App\\Enums\\Role")]}, {}, symbols
        )
        assert result == [InferredField(name="role", type="Role", optional=False)]
        assert "App\\Enums\\Role" in symbols

    def test_confirmation_field_follows_original(self) -> None:
        result = synthesize_fields(
            {"password": "required|string|confirmed", "name": "string"}, {}, MissingSymbols()
        )
        assert [f.name for f in result] == ["password", "password_confirmation", "name"]
        assert result[1].type == "string"
        assert result[1].optional is False

    def test_declared_confirmation_not_duplicated(self) -> None:
        result = synthesize_fields(
            {
                "password": "required|confirmed",
                "password_confirmation": "required|string|min:8",
            },
            {},
            MissingSymbols(),
        )
        assert [f.name for f in result] == ["password", "password_confirmation"]
        assert result[1].type == "string"

    def test_item_rules_produce_typed_array(self) -> None:
        fields = _fields({"tags": "array", "tags.*": "string"})
        assert fields["tags"].type == "Array<string>"
        assert "tags.*" not in fields

    @pytest.mark.parametrize(
        "rules",
        [
            {"a": "required|string", "b": ["nullable", "integer"], "c.*": "boolean"},
            {"x": "in:1,2", "y": "sometimes|array"},
        ],
    )
    def test_idempotent(self, rules: dict) -> None:
        first = synthesize_fields(rules, {}, MissingSymbols())
        second = synthesize_fields(rules, {}, MissingSymbols())
        assert first == second
