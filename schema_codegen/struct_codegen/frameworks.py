"""
Framework-specific decorations for generated declarations.

Each persistence framework is a ``CodeEmitter`` strategy. Supporting a new
framework means adding a ``Framework`` member and registering an emitter
for it in ``EMITTERS``.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from enum import Enum
from functools import lru_cache
from typing import Final

from ..shared.errors import FrameworkError
from .types import RustType


class Framework(Enum):
    """Persistence framework the generated code targets."""

    NONE = "none"
    SQLX = "sqlx"

    @classmethod
    def parse(cls, value: Framework | str) -> Framework:
        """Resolve a framework from its name (case-insensitive)."""
        if isinstance(value, Framework):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise FrameworkError(str(value), [f.value for f in cls]) from None


class EntityKind(Enum):
    """Kind of schema entity a declaration is generated for."""

    ENUM = "enum"
    COMPOSITE = "composite"
    TABLE = "table"


class CodeEmitter(ABC):
    """Supplies the attribute lines a framework needs."""

    framework: Framework

    @abstractmethod
    def type_decoration(self, kind: EntityKind, type_name: str) -> list[str]:
        """Attribute lines placed above a declaration.

        Args:
            kind: Kind of entity being declared.
            type_name: Name of the entity in the schema.
        """

    def field_attribute(self, rust_type: RustType) -> str | None:
        """Attribute placed above a struct field of the given type, if any."""
        return None

    def enum_value_attribute(self, original_name: str) -> str | None:
        """Attribute placed above an enum variant, if any."""
        return None

    def field_rename_attribute(
        self, kind: EntityKind, column_name: str, field_name: str
    ) -> str | None:
        """Attribute mapping a renamed struct field back to its column, if any."""
        return None


class PlainEmitter(CodeEmitter):
    """Plain Rust types with standard derives only."""

    framework = Framework.NONE

    def type_decoration(self, kind: EntityKind, type_name: str) -> list[str]:
        if kind is EntityKind.ENUM:
            return ["#[derive(Debug, Clone, PartialEq, Eq)]"]
        return ["#[derive(Debug, Clone)]"]


class SqlxEmitter(CodeEmitter):
    """Types usable with sqlx's PostgreSQL driver."""

    framework = Framework.SQLX

    def type_decoration(self, kind: EntityKind, type_name: str) -> list[str]:
        if kind is EntityKind.TABLE:
            return ["#[derive(Debug, Clone, sqlx::FromRow)]"]
        derive = (
            "#[derive(Debug, Clone, PartialEq, Eq, sqlx::Type)]"
            if kind is EntityKind.ENUM
            else "#[derive(Debug, Clone, sqlx::Type)]"
        )
        return [derive, f"#[sqlx(type_name = {_quote(type_name)})]"]

    def field_attribute(self, rust_type: RustType) -> str | None:
        # Missing nullable columns fall back to None
        if rust_type.is_optional:
            return "#[sqlx(default)]"
        return None

    def enum_value_attribute(self, original_name: str) -> str | None:
        return f"#[sqlx(rename = {_quote(original_name)})]"

    def field_rename_attribute(
        self, kind: EntityKind, column_name: str, field_name: str
    ) -> str | None:
        # FromRow matches columns by field name; raw identifiers match unprefixed
        if kind is EntityKind.TABLE and field_name.removeprefix("r#") != column_name:
            return f"#[sqlx(rename = {_quote(column_name)})]"
        return None


EMITTERS: Final[dict[Framework, type[CodeEmitter]]] = {
    Framework.NONE: PlainEmitter,
    Framework.SQLX: SqlxEmitter,
}


def emitter_for(framework: Framework | str) -> CodeEmitter:
    """Create the emitter for a framework selection."""
    return EMITTERS[Framework.parse(framework)]()


@lru_cache(maxsize=256)
def _quote(value: str) -> str:
    """Quote a string for Rust literal embedding."""
    return json.dumps(value, ensure_ascii=False)
