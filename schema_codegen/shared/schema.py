"""Schema model consumed by the code generators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class EnumValue:
    """A single label of an enumerated type."""

    name: str


@dataclass(frozen=True, slots=True)
class EnumType:
    """An enumerated type and its labels, in declaration order."""

    name: str
    values: tuple[EnumValue, ...] = ()


@dataclass(frozen=True, slots=True)
class Attribute:
    """An attribute of a composite type."""

    name: str
    data_type: str


@dataclass(frozen=True, slots=True)
class CompositeType:
    """A composite (row) type."""

    name: str
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True, slots=True)
class Column:
    """A table column described by its native type name."""

    name: str
    udt_name: str
    is_nullable: bool = True


@dataclass(frozen=True, slots=True)
class Table:
    """A table and its columns, in ordinal order."""

    name: str
    columns: tuple[Column, ...] = ()


@dataclass(frozen=True, slots=True)
class Schema:
    """Everything a generator needs to know about a database schema."""

    enums: tuple[EnumType, ...] = ()
    composite_types: tuple[CompositeType, ...] = ()
    tables: tuple[Table, ...] = ()

    def merge(self, other: Schema) -> Schema:
        """Return a schema holding this schema's entities followed by ``other``'s."""
        return Schema(
            enums=self.enums + other.enums,
            composite_types=self.composite_types + other.composite_types,
            tables=self.tables + other.tables,
        )

    def __len__(self) -> int:
        return len(self.enums) + len(self.composite_types) + len(self.tables)


@runtime_checkable
class SchemaProvider(Protocol):
    """Source of the schema to generate code for.

    Implementations may perform network or disk I/O. Any exception they raise
    is propagated to the caller of the generator unchanged.
    """

    async def get_schema(self) -> Schema: ...


@dataclass
class StaticSchemaProvider:
    """Provider serving a schema that is already in memory."""

    schema: Schema = field(default_factory=Schema)

    async def get_schema(self) -> Schema:
        return self.schema
