"""Tests for ruletype.generator.emitter -- rendering and writing declaration files."""

from __future__ import annotations

from pathlib import Path

from ruletype.generator import generate, render, write_output
from ruletype.generator.emitter import (
    API_RESPONSE_PRELUDE,
    is_up_to_date,
    paginated_collection_type,
    render_declaration,
)
from ruletype.models import (
    DeclarationKind,
    GeneratorConfig,
    InferredField,
    Project,
    TypeDeclaration,
)


EXPECTED_SMALL = """\
export type ApiResponse<T> =
    | { success: true; message: string; data: T }
    | { success: false; message: string; errors?: Record<string, unknown> };
export type LoginRequest = {
    email: string;
    password: string;
    remember?: boolean;
};
export type SessionData = {
    token: string;
    expires_at: string;
};
export type SessionResource = {
    token: string;
    expires_at: string;
};
export type SessionResourceResponse = ApiResponse<SessionResource>;
export type Theme = 'light' | 'dark';
"""


class TestRender:
    def test_small_project(self, small_project: Project) -> None:
        assert render(generate(small_project)) == EXPECTED_SMALL

    def test_render_is_deterministic(self, scanned_project: Project) -> None:
        assert render(generate(scanned_project)) == render(generate(scanned_project))

    def test_no_prelude_without_aliases(self, small_project: Project) -> None:
        config = GeneratorConfig(emit_response_aliases=False)
        text = render(generate(small_project, config), config)
        assert "ApiResponse" not in text
        assert text.endswith("export type Theme = 'light' | 'dark';\n")

    def test_prelude_comes_first(self, scanned_project: Project) -> None:
        text = render(generate(scanned_project))
        assert text.startswith(API_RESPONSE_PRELUDE)
        assert "export type UserCollectionResponse = ApiResponse<UserCollection>;" in text

    def test_empty_result(self) -> None:
        assert render(generate(Project())) == "\n"


class TestRenderDeclaration:
    def test_property_names_are_quoted_when_needed(self) -> None:
        declaration = TypeDeclaration(
            name="Filters",
            kind=DeclarationKind.REQUEST,
            fields=[
                InferredField(name="page", type="number"),
                InferredField(name="sort-by", type="string", optional=True),
            ],
        )
        assert render_declaration(declaration) == (
            "export type Filters = {\n"
            "    page: number;\n"
            "    'sort-by'?: string;\n"
            "};"
        )

    def test_empty_object(self) -> None:
        declaration = TypeDeclaration(name="Empty", kind=DeclarationKind.DATA)
        assert render_declaration(declaration) == "export type Empty = {};"

    def test_collection_is_paginated_union(self) -> None:
        declaration = TypeDeclaration(
            name="TagCollection", kind=DeclarationKind.COLLECTION, body="Array<TagResource>"
        )
        text = render_declaration(declaration)
        assert text.startswith("export type TagCollection =\n    | Array<TagResource>\n")
        assert text.endswith("  };")

    def test_paginated_collection_type(self) -> None:
        lines = paginated_collection_type("PostResource").splitlines()
        assert lines[0] == "    | Array<PostResource>"
        assert lines[1] == "    | {"
        assert lines[2].strip() == "data: Array<PostResource>;"
        assert "prev?: string | null;" in [line.strip() for line in lines]
        assert "total: number;" in [line.strip() for line in lines]
        assert lines[-1] == "      }"

    def test_native_enum(self) -> None:
        declaration = TypeDeclaration(
            name="Theme",
            kind=DeclarationKind.ENUM,
            body="'light' | 'dark'",
            enum_cases={"Light": "light", "Dark": "dark"},
        )
        assert render_declaration(declaration, native_enums=True) == (
            "export enum Theme {\n"
            "    Light = 'light',\n"
            "    Dark = 'dark',\n"
            "}"
        )

    def test_native_int_enum(self) -> None:
        declaration = TypeDeclaration(
            name="Level", kind=DeclarationKind.ENUM, enum_cases={"Low": 1, "High": 2}
        )
        assert "    Low = 1," in render_declaration(declaration, native_enums=True)

    def test_empty_enums(self) -> None:
        declaration = TypeDeclaration(name="Nothing", kind=DeclarationKind.ENUM)
        assert render_declaration(declaration) == "export type Nothing = never;"
        assert render_declaration(declaration, native_enums=True) == "export enum Nothing {}"


class TestWriteOutput:
    def test_creates_file_and_parents(self, tmp_path: Path) -> None:
        target = tmp_path / "resources" / "js" / "generated.d.ts"
        assert write_output("export type A = {};\n", target) is True
        assert target.read_text(encoding="utf-8") == "export type A = {};\n"

    def test_unchanged_content_not_rewritten(self, tmp_path: Path) -> None:
        target = tmp_path / "generated.d.ts"
        write_output("export type A = {};\n", target)
        mtime = target.stat().st_mtime_ns
        assert write_output("export type A = {};\n", target) is False
        assert target.stat().st_mtime_ns == mtime

    def test_changed_content_rewritten(self, tmp_path: Path) -> None:
        target = tmp_path / "generated.d.ts"
        write_output("export type A = {};\n", target)
        assert write_output("export type B = {};\n", target) is True
        assert target.read_text(encoding="utf-8") == "export type B = {};\n"

    def test_is_up_to_date(self, tmp_path: Path) -> None:
        target = tmp_path / "generated.d.ts"
        assert is_up_to_date("x\n", target) is False
        target.write_text("x\n", encoding="utf-8")
        assert is_up_to_date("x\n", target) is True
        assert is_up_to_date("y\n", target) is False

    def test_directory_target_is_not_up_to_date(self, tmp_path: Path) -> None:
        assert is_up_to_date("x\n", tmp_path) is False
