"""
Rust type system for struct generation.

Maps PostgreSQL native type names onto a small closed set of Rust type
expressions and works out which ``use`` imports and which sibling
declarations each expression needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Callable, Final, Iterator


class TypeKind(Enum):
    """Tag of a RustType variant."""

    PRIMITIVE = "primitive"
    UUID = "uuid"
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"
    TIMESTAMP_TZ = "timestamp_tz"
    INTERVAL = "interval"
    DECIMAL = "decimal"
    IP_NETWORK = "ip_network"
    JSON = "json"
    TREE = "tree"
    QUERY = "query"
    MONEY = "money"
    OPTION = "option"
    VECTOR = "vector"
    RANGE = "range"
    CUSTOM = "custom"


class CustomKind(Enum):
    """How a custom type name is brought into scope."""

    EXTERNAL = "external"  # path into another crate
    RESERVED = "reserved"  # value type provided by the framework
    LOCAL = "local"  # another generated declaration


WRAPPER_KINDS: Final[frozenset[TypeKind]] = frozenset({
    TypeKind.OPTION,
    TypeKind.VECTOR,
    TypeKind.RANGE,
})

_WRAPPER_TEMPLATES: Final[dict[TypeKind, str]] = {
    TypeKind.OPTION: "Option<{}>",
    TypeKind.VECTOR: "Vec<{}>",
    TypeKind.RANGE: "PgRange<{}>",
}

_LEAF_NAMES: Final[dict[TypeKind, str]] = {
    TypeKind.UUID: "Uuid",
    TypeKind.DATE: "NaiveDate",
    TypeKind.TIME: "NaiveTime",
    TypeKind.TIMESTAMP: "NaiveDateTime",
    TypeKind.TIMESTAMP_TZ: "DateTime<Utc>",
    TypeKind.INTERVAL: "PgInterval",
    TypeKind.DECIMAL: "Decimal",
    TypeKind.IP_NETWORK: "IpNetwork",
    TypeKind.JSON: "Value",
    TypeKind.TREE: "LTree",
    TypeKind.QUERY: "TSQuery",
    TypeKind.MONEY: "PgMoney",
}

# Imports required by each semantic kind
KIND_IMPORTS: Final[dict[TypeKind, str]] = {
    TypeKind.UUID: "uuid::Uuid",
    TypeKind.DATE: "chrono::NaiveDate",
    TypeKind.TIME: "chrono::NaiveTime",
    TypeKind.TIMESTAMP: "chrono::NaiveDateTime",
    TypeKind.TIMESTAMP_TZ: "chrono::{DateTime, Utc}",
    TypeKind.INTERVAL: "sqlx::postgres::types::PgInterval",
    TypeKind.DECIMAL: "rust_decimal::Decimal",
    TypeKind.IP_NETWORK: "ipnetwork::IpNetwork",
    TypeKind.JSON: "serde_json::Value",
    TypeKind.TREE: "postgres_types::LTree",
    TypeKind.QUERY: "postgres_types::TSQuery",
    TypeKind.MONEY: "sqlx::postgres::types::PgMoney",
}

RANGE_IMPORT: Final[str] = "sqlx::postgres::types::PgRange"

# Crates whose fully qualified paths are imported by their root
KNOWN_EXTERNAL_PACKAGES: Final[frozenset[str]] = frozenset({
    "postgis",
    "mac_address",
    "bit_vec",
})

# Bare names that refer to framework value types rather than generated code
FRAMEWORK_RESERVED: Final[dict[str, str]] = {
    "Oid": "sqlx::postgres::types::Oid",
}


@dataclass(frozen=True, slots=True)
class RustType:
    """A Rust type expression.

    ``inner`` is set for the OPTION, VECTOR and RANGE wrappers; ``name`` is
    set for PRIMITIVE and CUSTOM leaves. Every other kind is a fixed leaf.
    """

    kind: TypeKind
    inner: RustType | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        if (self.kind in WRAPPER_KINDS) != (self.inner is not None):
            raise ValueError(f"{self.kind.name} type has an invalid inner type")
        if self.kind in (TypeKind.PRIMITIVE, TypeKind.CUSTOM) and not self.name:
            raise ValueError(f"{self.kind.name} type requires a name")

    @classmethod
    def primitive(cls, name: str) -> RustType:
        return cls(TypeKind.PRIMITIVE, name=name)

    @classmethod
    def custom(cls, name: str) -> RustType:
        return cls(TypeKind.CUSTOM, name=name)

    @classmethod
    def leaf(cls, kind: TypeKind) -> RustType:
        return cls(kind)

    @classmethod
    def vector(cls, inner: RustType) -> RustType:
        return cls(TypeKind.VECTOR, inner=inner)

    @classmethod
    def range_of(cls, inner: RustType) -> RustType:
        return cls(TypeKind.RANGE, inner=inner)

    def optional(self) -> RustType:
        """Wrap this type in ``Option``."""
        return RustType(TypeKind.OPTION, inner=self)

    @property
    def is_optional(self) -> bool:
        return self.kind is TypeKind.OPTION

    def walk(self) -> Iterator[RustType]:
        """Yield this type and every type nested inside it, outermost first."""
        current: RustType | None = self
        while current is not None:
            yield current
            current = current.inner

    def replace_custom(self, rename: Callable[[str], str]) -> RustType:
        """Return a copy with every CUSTOM leaf name passed through ``rename``."""
        if self.inner is not None:
            return RustType(self.kind, inner=self.inner.replace_custom(rename))
        if self.kind is TypeKind.CUSTOM:
            return RustType.custom(rename(self.name))
        return self

    def __str__(self) -> str:
        if self.inner is not None:
            return _WRAPPER_TEMPLATES[self.kind].format(self.inner)
        if self.name is not None:
            return self.name
        return _LEAF_NAMES[self.kind]


# PostgreSQL types passed straight through as Rust primitives
PG_PRIMITIVES: Final[dict[str, str]] = {
    "bool": "bool",
    "char": "i8",
    "int2": "i16",
    "smallserial": "i16",
    "int4": "i32",
    "serial": "i32",
    "int8": "i64",
    "bigserial": "i64",
    "float4": "f32",
    "float8": "f64",
    "text": "String",
    "varchar": "String",
    "bpchar": "String",
    "name": "String",
    "citext": "String",
    "xml": "String",
    "bytea": "Vec<u8>",
    "void": "()",
}

PG_SEMANTIC: Final[dict[str, TypeKind]] = {
    "uuid": TypeKind.UUID,
    "date": TypeKind.DATE,
    "time": TypeKind.TIME,
    "timetz": TypeKind.TIME,
    "timestamp": TypeKind.TIMESTAMP,
    "timestamptz": TypeKind.TIMESTAMP_TZ,
    "interval": TypeKind.INTERVAL,
    "numeric": TypeKind.DECIMAL,
    "inet": TypeKind.IP_NETWORK,
    "cidr": TypeKind.IP_NETWORK,
    "json": TypeKind.JSON,
    "jsonb": TypeKind.JSON,
    "ltree": TypeKind.TREE,
    "tsquery": TypeKind.QUERY,
    "money": TypeKind.MONEY,
}

# Range types and their element type
PG_RANGES: Final[dict[str, str]] = {
    "int4range": "int4",
    "int8range": "int8",
    "numrange": "numeric",
    "tsrange": "timestamp",
    "tstzrange": "timestamptz",
    "daterange": "date",
}

PG_MULTIRANGES: Final[dict[str, str]] = {
    "int4multirange": "int4range",
    "int8multirange": "int8range",
    "nummultirange": "numrange",
    "tsmultirange": "tsrange",
    "tstzmultirange": "tstzrange",
    "datemultirange": "daterange",
}

# Types provided by other crates or by the framework
PG_LIBRARY_TYPES: Final[dict[str, str]] = {
    "oid": "Oid",
    "geometry": "postgis::ewkb::Geometry",
    "geography": "postgis::ewkb::Geometry",
    "macaddr": "mac_address::MacAddress",
    "bit": "bit_vec::BitVec",
    "varbit": "bit_vec::BitVec",
}

# information_schema spellings of the built-in types
PG_ALIASES: Final[dict[str, str]] = {
    "boolean": "bool",
    "smallint": "int2",
    "integer": "int4",
    "int": "int4",
    "bigint": "int8",
    "real": "float4",
    "double precision": "float8",
    "character varying": "varchar",
    "character": "bpchar",
    "decimal": "numeric",
    "timestamp without time zone": "timestamp",
    "timestamp with time zone": "timestamptz",
    "time without time zone": "time",
    "time with time zone": "timetz",
    "bit varying": "varbit",
}


@lru_cache(maxsize=1024)
def map_udt_name(udt_name: str) -> RustType:
    """Map a PostgreSQL type name to a Rust type.

    Array types (``_int4`` or ``int4[]``) become ``Vec``, range types become
    ``PgRange`` and multiranges a ``Vec`` of ranges. Names that are not
    built-in types map to a CUSTOM type carrying the original name, and a
    blank name maps to ``_``, so this never fails.

    Nullability is not considered here; callers wrap the result with
    ``RustType.optional()``.
    """
    if udt_name.startswith("_") and len(udt_name) > 1:
        return RustType.vector(map_udt_name(udt_name[1:]))
    if udt_name.endswith("[]") and len(udt_name) > 2:
        return RustType.vector(map_udt_name(udt_name[:-2]))

    key = udt_name.lower()
    key = PG_ALIASES.get(key, key)

    if key in PG_PRIMITIVES:
        return RustType.primitive(PG_PRIMITIVES[key])
    if key in PG_SEMANTIC:
        return RustType.leaf(PG_SEMANTIC[key])
    if key in PG_RANGES:
        return RustType.range_of(map_udt_name(PG_RANGES[key]))
    if key in PG_MULTIRANGES:
        return RustType.vector(map_udt_name(PG_MULTIRANGES[key]))
    if key in PG_LIBRARY_TYPES:
        return RustType.custom(PG_LIBRARY_TYPES[key])

    return RustType.custom(udt_name if udt_name.strip() else "_")


def classify_custom(name: str) -> CustomKind:
    """Decide whether a custom type name is external, reserved or local."""
    if "::" in name:
        return CustomKind.EXTERNAL
    if name in FRAMEWORK_RESERVED:
        return CustomKind.RESERVED
    return CustomKind.LOCAL


def _custom_imports(name: str) -> set[str]:
    kind = classify_custom(name)
    if kind is CustomKind.EXTERNAL:
        root = name.split("::", 1)[0]
        # Unknown crates are left fully qualified
        return {root} if root in KNOWN_EXTERNAL_PACKAGES else set()
    if kind is CustomKind.RESERVED:
        return {FRAMEWORK_RESERVED[name]}
    return set()


def required_imports(rust_type: RustType) -> set[str]:
    """Collect the ``use`` paths a type needs.

    Wrappers are looked through to their inner type; ``PgRange`` additionally
    needs its own import. Local custom types need no import, see
    ``local_references``.
    """
    kind = rust_type.kind
    if rust_type.inner is not None:
        imports = required_imports(rust_type.inner)
        if kind is TypeKind.RANGE:
            imports.add(RANGE_IMPORT)
        return imports
    if kind is TypeKind.CUSTOM:
        return _custom_imports(rust_type.name)
    path = KIND_IMPORTS.get(kind)
    return {path} if path else set()


def local_references(rust_type: RustType) -> set[str]:
    """Names of the generated declarations a type refers to."""
    return {
        t.name
        for t in rust_type.walk()
        if t.kind is TypeKind.CUSTOM and classify_custom(t.name) is CustomKind.LOCAL
    }
