"""Shared utilities for the code generators."""

from .schema_loader import (
    SchemaCache,
    YamlSchemaProvider,
    load_schema,
    collect_schema_paths,
    schema_from_mapping,
)
from .naming import (
    to_pascal_case,
    to_snake_case,
    singularize,
    type_name,
    declaration_name,
    sanitize_module_name,
    sanitize_field_name,
    RUST_KEYWORDS,
)
from .errors import (
    SchemaError,
    SchemaValidationError,
    FrameworkError,
)
from .schema import (
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

__all__ = [
    # Schema model
    "Attribute",
    "Column",
    "CompositeType",
    "EnumType",
    "EnumValue",
    "Schema",
    "SchemaProvider",
    "StaticSchemaProvider",
    "Table",
    # Schema loading
    "SchemaCache",
    "YamlSchemaProvider",
    "load_schema",
    "collect_schema_paths",
    "schema_from_mapping",
    # Naming utilities
    "to_pascal_case",
    "to_snake_case",
    "singularize",
    "type_name",
    "declaration_name",
    "sanitize_module_name",
    "sanitize_field_name",
    "RUST_KEYWORDS",
    # Errors
    "SchemaError",
    "SchemaValidationError",
    "FrameworkError",
]
