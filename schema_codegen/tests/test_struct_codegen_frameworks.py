import pytest

from schema_codegen.shared.errors import FrameworkError
from schema_codegen.struct_codegen.frameworks import (
    EMITTERS,
    EntityKind,
    Framework,
    PlainEmitter,
    SqlxEmitter,
    emitter_for,
)
from schema_codegen.struct_codegen.types import map_udt_name


class TestFramework:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("none", Framework.NONE),
            ("sqlx", Framework.SQLX),
            ("SQLx", Framework.SQLX),
            (" sqlx ", Framework.SQLX),
            (Framework.SQLX, Framework.SQLX),
        ],
    )
    def test_parse(self, value, expected):
        assert Framework.parse(value) is expected

    def test_parse_unknown(self):
        with pytest.raises(FrameworkError) as exc_info:
            Framework.parse("diesel")

        assert exc_info.value.framework == "diesel"
        assert "expected one of: none, sqlx" in str(exc_info.value)

    def test_every_framework_has_an_emitter(self):
        for framework in Framework:
            assert EMITTERS[framework].framework is framework


class TestEmitterFor:
    def test_by_enum(self):
        assert isinstance(emitter_for(Framework.NONE), PlainEmitter)

    def test_by_name(self):
        assert isinstance(emitter_for("sqlx"), SqlxEmitter)


class TestPlainEmitter:
    @pytest.mark.parametrize(
        "kind,expected",
        [
            (EntityKind.ENUM, ["#[derive(Debug, Clone, PartialEq, Eq)]"]),
            (EntityKind.COMPOSITE, ["#[derive(Debug, Clone)]"]),
            (EntityKind.TABLE, ["#[derive(Debug, Clone)]"]),
        ],
    )
    def test_type_decoration(self, kind, expected):
        assert PlainEmitter().type_decoration(kind, "thing") == expected

    def test_no_field_attributes(self):
        emitter = PlainEmitter()
        assert emitter.field_attribute(map_udt_name("text").optional()) is None
        assert emitter.enum_value_attribute("active") is None


class TestSqlxEmitter:
    def test_enum_decoration(self):
        assert SqlxEmitter().type_decoration(EntityKind.ENUM, "status") == [
            "#[derive(Debug, Clone, PartialEq, Eq, sqlx::Type)]",
            '#[sqlx(type_name = "status")]',
        ]

    def test_composite_decoration(self):
        assert SqlxEmitter().type_decoration(EntityKind.COMPOSITE, "address") == [
            "#[derive(Debug, Clone, sqlx::Type)]",
            '#[sqlx(type_name = "address")]',
        ]

    def test_table_decoration(self):
        assert SqlxEmitter().type_decoration(EntityKind.TABLE, "users") == [
            "#[derive(Debug, Clone, sqlx::FromRow)]",
        ]

    def test_default_marker_only_on_optional_fields(self):
        emitter = SqlxEmitter()
        assert emitter.field_attribute(map_udt_name("text").optional()) == "#[sqlx(default)]"
        assert emitter.field_attribute(map_udt_name("_text").optional()) == "#[sqlx(default)]"
        assert emitter.field_attribute(map_udt_name("text")) is None
        assert emitter.field_attribute(map_udt_name("_text")) is None
        assert emitter.field_attribute(map_udt_name("int4range")) is None

    def test_enum_value_rename_keeps_original_spelling(self):
        assert SqlxEmitter().enum_value_attribute("past_due") == '#[sqlx(rename = "past_due")]'

    def test_rename_escapes_quotes(self):
        assert SqlxEmitter().enum_value_attribute('say "hi"') == (
            '#[sqlx(rename = "say \\"hi\\"")]'
        )

    @pytest.mark.parametrize(
        "column,field,expected",
        [
            ("self", "self_", '#[sqlx(rename = "self")]'),
            ("order date", "order_date", '#[sqlx(rename = "order date")]'),
            ("type", "r#type", None),
            ("email", "email", None),
        ],
    )
    def test_field_rename_attribute(self, column, field, expected):
        assert SqlxEmitter().field_rename_attribute(EntityKind.TABLE, column, field) == expected

    def test_composite_fields_are_not_renamed(self):
        emitter = SqlxEmitter()
        assert emitter.field_rename_attribute(EntityKind.COMPOSITE, "self", "self_") is None

    def test_plain_emitter_never_renames_fields(self):
        emitter = PlainEmitter()
        assert emitter.field_rename_attribute(EntityKind.TABLE, "self", "self_") is None
