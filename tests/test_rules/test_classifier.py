"""Tests for ruletype.rules.classifier and ruletype.rules.enums."""

from __future__ import annotations

import pytest

from ruletype.models import MissingSymbols
from ruletype.rules.classifier import classify, infer_rule_type, is_optional, is_required
from ruletype.rules.enums import (
    parse_in_values,
    resolve_choice,
    resolve_enum,
    value_to_literal,
)
from ruletype.rules.objects import EnumRule, EnumValueRule, OpaqueRule


class TestPresence:
    def test_required(self) -> None:
        assert is_required(["required", "string"])

    def test_present_counts_as_required(self) -> None:
        assert is_required(["present"])

    def test_sometimes_overrides_required(self) -> None:
        assert not is_required(["sometimes", "required"])
        assert is_optional(True, ["sometimes"])

    def test_case_insensitive(self) -> None:
        assert classify(["REQUIRED", "Nullable"]).required
        assert classify(["REQUIRED", "Nullable"]).nullable

    def test_objects_ignored_for_names(self) -> None:
        assert not is_required([OpaqueRule("required")])


class TestInferRuleType:
    @pytest.fixture
    def symbols(self) -> MissingSymbols:
        return MissingSymbols()

    @pytest.mark.parametrize(
        ("tokens", "expected"),
        [
            (["boolean"], "boolean"),
            (["accepted"], "boolean"),
            (["integer", "min:1"], "number"),
            (["digits_between:1,4"], "number"),
            (["image", "max:1024"], "File"),
            (["json"], "Record<string, unknown>"),
            (["email"], "string"),
            (["date_format:Y-m-d"], "string"),
            (["max:10"], None),
        ],
    )
    def test_scalar_groups(self, tokens: list[str], expected: str, symbols: MissingSymbols) -> None:
        assert infer_rule_type(tokens, None, symbols) == expected

    def test_boolean_wins_over_string(self, symbols: MissingSymbols) -> None:
        assert infer_rule_type(["string", "boolean"], None, symbols) == "boolean"

    def test_array_with_item_rules(self, symbols: MissingSymbols) -> None:
        assert infer_rule_type(["array"], ["integer"], symbols) == "Array<number>"

    def test_array_without_item_rules(self, symbols: MissingSymbols) -> None:
        assert infer_rule_type(["array"], None, symbols) == "Array<unknown>"

    def test_item_rules_imply_array(self, symbols: MissingSymbols) -> None:
        assert infer_rule_type([], ["string"], symbols) == "Array<string>"

    def test_enum_beats_choice_and_scalars(self, symbols: MissingSymbols) -> None:
        tokens = ["string", "in:a,b", EnumRule("App\\Enums\\Status")]
        assert infer_rule_type(tokens, None, symbols) == "Status"
        assert "App\\Enums\\Status" in symbols

    def test_choice_beats_array(self, symbols: MissingSymbols) -> None:
        assert infer_rule_type(["array", "in:a"], None, symbols) == "'a'"


class TestEnums:
    def test_first_enum_constraint_wins(self) -> None:
        symbols = MissingSymbols()
        tokens = [EnumValueRule("App\\Enums\\UserRole"), EnumRule("App\\Enums\\Status")]
        assert resolve_enum(tokens, symbols) == "UserRole"
        assert symbols.short_names() == ["UserRole"]

    def test_string_enum_rule(self) -> None:
        symbols = MissingSymbols()
        assert resolve_enum(["enum:\\App\\Enums\\Status"], symbols) == "Status"
        assert list(symbols) == ["App\\Enums\\Status"]

    def test_malformed_rule_object_ignored(self) -> None:
        class Broken:
            def type_reference(self):
                raise RuntimeError("boom")

        assert resolve_enum([Broken()], MissingSymbols()) is None

    def test_choice_literals(self) -> None:
        assert resolve_choice(["required", "in:active,inactive,1,true"]) == (
            "'active' | 'inactive' | 1 | true"
        )

    def test_quoted_choice_values(self) -> None:
        assert parse_in_values('"a,b","c""d"') == ["a,b", 'c"d']

    def test_choice_without_values_is_empty_literal(self) -> None:
        assert resolve_choice(["in:"]) == "''"

    @pytest.mark.parametrize(
        ("value", "literal"),
        [
            ("", "''"),
            ("TRUE", "true"),
            ("-1.5", "-1.5"),
            ("draft", "'draft'"),
            ("o'clock", "'o\\'clock'"),
        ],
    )
    def test_value_to_literal(self, value: str, literal: str) -> None:
        assert value_to_literal(value) == literal
