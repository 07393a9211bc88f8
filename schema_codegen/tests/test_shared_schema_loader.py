import asyncio
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from schema_codegen.shared.errors import SchemaError, SchemaValidationError
from schema_codegen.shared.schema import (
    Attribute,
    Column,
    CompositeType,
    EnumType,
    EnumValue,
    Schema,
    SchemaProvider,
    StaticSchemaProvider,
    Table,
)
from schema_codegen.shared.schema_loader import (
    CacheKey,
    SchemaCache,
    YamlSchemaProvider,
    collect_schema_paths,
    get_global_cache,
    load_schema,
    schema_from_mapping,
)

FULL_SCHEMA = """
enums:
  - name: status
    values: [active, past_due]
composite_types:
  - name: address
    attributes:
      - name: street
        type: text
      - name: zip
        udt_name: varchar
tables:
  - name: users
    columns:
      - name: id
        type: uuid
        nullable: false
      - name: email
        type: text
"""


class TestCacheKey:
    def test_from_path(self, tmp_path):
        file_path = tmp_path / "test.yaml"
        file_path.write_text("content")

        key = CacheKey.from_path(file_path)
        assert key.path == file_path.resolve()
        assert isinstance(key.mtime, float)
        assert key.size == len("content")

    def test_frozen(self, tmp_path):
        file_path = tmp_path / "test.yaml"
        file_path.write_text("content")

        key = CacheKey.from_path(file_path)
        with pytest.raises(AttributeError):
            key.path = Path("/new/path")


class TestSchemaCache:
    def test_init(self):
        cache = SchemaCache()
        assert len(cache) == 0
        assert cache._max_size == 100

    def test_get_new_schema(self, tmp_path):
        cache = SchemaCache()
        schema_path = tmp_path / "test.yaml"
        schema_path.write_text(FULL_SCHEMA)

        schema = cache.get(schema_path)
        assert [t.name for t in schema.tables] == ["users"]
        assert len(cache) == 1

    def test_get_cached_schema(self, tmp_path):
        cache = SchemaCache()
        schema_path = tmp_path / "test.yaml"
        schema_path.write_text(FULL_SCHEMA)

        schema1 = cache.get(schema_path)
        schema2 = cache.get(schema_path)
        assert schema1 is schema2

    def test_get_reads_file_once(self, tmp_path):
        cache = SchemaCache()
        schema_path = tmp_path / "test.yaml"
        schema_path.write_text(FULL_SCHEMA)

        original_read_text = Path.read_text
        with (
            patch.object(Path, "read_text", autospec=True, side_effect=original_read_text) as read_text,
            patch.object(Path, "read_bytes", autospec=True) as read_bytes,
        ):
            cache.get(schema_path)

        assert read_text.call_count == 1
        read_bytes.assert_not_called()

    def test_get_schema_file_changed(self, tmp_path):
        cache = SchemaCache()
        schema_path = tmp_path / "test.yaml"
        schema_path.write_text("tables: []\n")

        schema1 = cache.get(schema_path)
        schema_path.write_text(FULL_SCHEMA)
        schema2 = cache.get(schema_path)

        assert schema1.tables == ()
        assert len(schema2.tables) == 1

    def test_get_schema_max_cache_size(self, tmp_path):
        cache = SchemaCache(max_size=2)
        for i in range(3):
            path = tmp_path / f"test{i}.yaml"
            path.write_text(f"tables:\n  - name: table{i}\n")
            cache.get(path)

        assert len(cache) == 2

    def test_invalidate(self, tmp_path):
        cache = SchemaCache()
        schema_path = tmp_path / "test.yaml"
        schema_path.write_text("tables: []\n")

        cache.get(schema_path)
        cache.invalidate(schema_path)
        assert len(cache) == 0

        cache.get(schema_path)
        cache.invalidate()
        assert len(cache) == 0


class TestLoadSchema:
    def test_load_valid_schema(self, tmp_path):
        schema_path = tmp_path / "test.yaml"
        schema_path.write_text("key: value\nlist:\n  - item1\n  - item2\n")

        data = load_schema(schema_path)
        assert data == {"key": "value", "list": ["item1", "item2"]}

    def test_load_empty_file(self, tmp_path):
        schema_path = tmp_path / "test.yaml"
        schema_path.write_text("")

        assert load_schema(schema_path) == {}

    def test_load_schema_file_not_found(self, tmp_path):
        with pytest.raises(SchemaError) as exc_info:
            load_schema(tmp_path / "nonexistent.yaml")

        assert "Failed to read schema file" in str(exc_info.value)

    def test_load_schema_invalid_yaml(self, tmp_path):
        schema_path = tmp_path / "test.yaml"
        schema_path.write_text("invalid: yaml: content: [\n")

        with pytest.raises(SchemaError) as exc_info:
            load_schema(schema_path)

        assert "Invalid YAML" in str(exc_info.value)

    def test_load_schema_not_dict(self, tmp_path):
        schema_path = tmp_path / "test.yaml"
        schema_path.write_text("- item1\n- item2\n")

        with pytest.raises(SchemaError) as exc_info:
            load_schema(schema_path)

        assert "Schema root must be a mapping" in str(exc_info.value)


class TestSchemaFromMapping:
    def test_full_schema(self):
        schema = schema_from_mapping(yaml.safe_load(FULL_SCHEMA))

        assert schema.enums == (
            EnumType("status", (EnumValue("active"), EnumValue("past_due"))),
        )
        assert schema.composite_types == (
            CompositeType(
                "address",
                (Attribute("street", "text"), Attribute("zip", "varchar")),
            ),
        )
        assert schema.tables == (
            Table(
                "users",
                (Column("id", "uuid", False), Column("email", "text", True)),
            ),
        )

    def test_empty_mapping(self):
        assert schema_from_mapping({}) == Schema()

    def test_enum_values_as_mappings(self):
        schema = schema_from_mapping(
            {"enums": [{"name": "mood", "values": [{"name": "happy"}, "sad"]}]}
        )
        assert [v.name for v in schema.enums[0].values] == ["happy", "sad"]

    def test_duplicate_enum_value(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            schema_from_mapping({"enums": [{"name": "mood", "values": ["ok", "ok"]}]})

        assert "duplicate enum value 'ok'" in str(exc_info.value)
        assert exc_info.value.field == "mood"

    def test_section_not_a_list(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            schema_from_mapping({"tables": {"users": {}}}, "schema.yaml")

        assert str(exc_info.value) == "[schema.yaml] schema must provide a 'tables' list"

    def test_missing_name(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            schema_from_mapping({"tables": [{"columns": []}]})

        assert "missing required 'name'" in str(exc_info.value)

    def test_missing_column_type(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            schema_from_mapping({"tables": [{"name": "users", "columns": [{"name": "id"}]}]})

        assert exc_info.value.field == "users.id"
        assert "missing required 'type'" in str(exc_info.value)

    @pytest.mark.parametrize("value", ["false", "no", 0, None])
    def test_nullable_must_be_boolean(self, value):
        data = {
            "tables": [
                {"name": "users", "columns": [{"name": "id", "type": "uuid", "nullable": value}]}
            ]
        }

        with pytest.raises(SchemaValidationError) as exc_info:
            schema_from_mapping(data)

        assert exc_info.value.field == "users.id"
        assert "'nullable' must be true or false" in str(exc_info.value)


class TestCollectSchemaPaths:
    def test_collect_single_file(self, tmp_path):
        schema_path = tmp_path / "test.yaml"
        schema_path.write_text("tables: []\n")

        assert collect_schema_paths([schema_path]) == [schema_path.resolve()]

    def test_collect_directory(self, tmp_path):
        (tmp_path / "schema1.yaml").write_text("tables: []\n")
        (tmp_path / "schema2.yml").write_text("tables: []\n")
        (tmp_path / "not_schema.txt").write_text("content")

        paths = collect_schema_paths([tmp_path])
        assert paths == [
            (tmp_path / "schema1.yaml").resolve(),
            (tmp_path / "schema2.yml").resolve(),
        ]

    def test_collect_nonexistent_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            collect_schema_paths([tmp_path / "nonexistent"])

    def test_collect_deduplicates(self, tmp_path):
        schema_path = tmp_path / "test.yaml"
        schema_path.write_text("tables: []\n")

        assert collect_schema_paths([schema_path, schema_path]) == [schema_path.resolve()]


class TestYamlSchemaProvider:
    def test_is_schema_provider(self, tmp_path):
        assert isinstance(YamlSchemaProvider([tmp_path]), SchemaProvider)

    def test_get_schema(self, tmp_path):
        schema_path = tmp_path / "test.yaml"
        schema_path.write_text(FULL_SCHEMA)

        schema = asyncio.run(YamlSchemaProvider([schema_path], SchemaCache()).get_schema())

        assert len(schema) == 3
        assert schema.tables[0].columns[0] == Column("id", "uuid", False)

    def test_merges_files_in_order(self, tmp_path):
        (tmp_path / "a.yaml").write_text("tables:\n  - name: first\n")
        (tmp_path / "b.yaml").write_text("tables:\n  - name: second\n")

        schema = asyncio.run(YamlSchemaProvider([tmp_path], SchemaCache()).get_schema())

        assert [t.name for t in schema.tables] == ["first", "second"]

    def test_invalid_file_raises(self, tmp_path):
        schema_path = tmp_path / "test.yaml"
        schema_path.write_text("- not a mapping\n")

        with pytest.raises(SchemaError):
            asyncio.run(YamlSchemaProvider([schema_path], SchemaCache()).get_schema())


class TestStaticSchemaProvider:
    def test_returns_schema(self):
        schema = Schema(tables=(Table("users"),))
        assert asyncio.run(StaticSchemaProvider(schema).get_schema()) is schema


class TestGetGlobalCache:
    def test_get_global_cache(self):
        assert get_global_cache() is get_global_cache()

    @patch("schema_codegen.shared.schema_loader._global_cache", None)
    def test_get_global_cache_creates_new(self):
        assert isinstance(get_global_cache(), SchemaCache)
