"""Schema loading utilities with caching support."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Sequence

import yaml

from .errors import SchemaError, SchemaValidationError
from .schema import Attribute, Column, CompositeType, EnumType, EnumValue, Schema, Table

# Accepted spellings of a column or attribute's native type
_TYPE_KEYS: tuple[str, ...] = ("type", "udt_name", "data_type")


@dataclass(frozen=True, slots=True)
class CacheKey:
    """Immutable cache key for schema files."""

    path: Path
    mtime: float
    size: int

    @classmethod
    def from_path(cls, path: Path) -> CacheKey:
        """Create a cache key from a file path."""
        stat = path.stat()
        return cls(
            path=path.resolve(),
            mtime=stat.st_mtime,
            size=stat.st_size,
        )


@dataclass
class CachedSchema:
    """A cached schema with metadata."""

    schema: Schema
    key: CacheKey


class SchemaCache:
    """Schema cache with automatic invalidation.

    Caches parsed schema files and automatically invalidates when
    the underlying file changes (based on mtime and size).
    """

    __slots__ = ("_cache", "_max_size")

    def __init__(self, max_size: int = 100) -> None:
        self._cache: dict[Path, CachedSchema] = {}
        self._max_size = max_size

    def get(self, path: Path) -> Schema:
        """Get a schema from cache, loading it if necessary.

        Args:
            path: Path to the schema file.

        Returns:
            The parsed schema.

        Raises:
            SchemaError: If the schema is invalid.
        """
        resolved = path.resolve()
        current_key = CacheKey.from_path(resolved)

        cached = self._cache.get(resolved)
        if cached is not None and cached.key == current_key:
            return cached.schema

        schema = schema_from_mapping(load_schema(resolved), str(resolved))

        # Evict oldest entries if cache is full
        if len(self._cache) >= self._max_size:
            oldest = next(iter(self._cache))
            del self._cache[oldest]

        self._cache[resolved] = CachedSchema(
            schema=schema,
            key=current_key,
        )

        return schema

    def invalidate(self, path: Path | None = None) -> None:
        """Invalidate cached schemas.

        Args:
            path: Specific path to invalidate, or None to clear all.
        """
        if path is None:
            self._cache.clear()
        else:
            self._cache.pop(path.resolve(), None)

    def __len__(self) -> int:
        return len(self._cache)


def load_schema(schema_path: Path) -> dict[str, Any]:
    """Load a schema document from a YAML file.

    Args:
        schema_path: Path to the schema file.

    Returns:
        The parsed schema dictionary.

    Raises:
        SchemaError: If the file cannot be read or parsed.
    """
    try:
        content = schema_path.read_text(encoding="utf-8")
    except OSError as e:
        raise SchemaError(f"Failed to read schema file: {e}", str(schema_path)) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SchemaError(f"Invalid YAML: {e}", str(schema_path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SchemaError("Schema root must be a mapping", str(schema_path))

    return data


def _section(data: dict[str, Any], key: str, schema_path: str | None) -> list[Any]:
    raw = data.get(key, [])
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise SchemaValidationError(f"schema must provide a '{key}' list", schema_path)
    return raw


def _name_of(entry: Any, kind: str, schema_path: str | None) -> str:
    if not isinstance(entry, dict) or not entry.get("name"):
        raise SchemaValidationError(f"{kind} entry is missing required 'name'", schema_path)
    return str(entry["name"])


def _type_of(entry: dict[str, Any], owner: str, schema_path: str | None) -> str:
    for key in _TYPE_KEYS:
        if entry.get(key):
            return str(entry[key])
    raise SchemaValidationError(
        "is missing required 'type'",
        schema_path,
        field=f"{owner}.{entry['name']}",
    )


def _enum_from(entry: Any, schema_path: str | None) -> EnumType:
    name = _name_of(entry, "enum", schema_path)
    values: list[EnumValue] = []
    for raw in _section(entry, "values", schema_path):
        label = raw.get("name") if isinstance(raw, dict) else raw
        if label is None or label == "":
            raise SchemaValidationError("enum value has no name", schema_path, field=name)
        values.append(EnumValue(str(label)))

    seen: set[str] = set()
    for value in values:
        if value.name in seen:
            raise SchemaValidationError(
                f"duplicate enum value '{value.name}'", schema_path, field=name
            )
        seen.add(value.name)

    return EnumType(name=name, values=tuple(values))


def _composite_from(entry: Any, schema_path: str | None) -> CompositeType:
    name = _name_of(entry, "composite type", schema_path)
    attributes = tuple(
        Attribute(
            name=_name_of(raw, "attribute", schema_path),
            data_type=_type_of(raw, name, schema_path),
        )
        for raw in _section(entry, "attributes", schema_path)
    )
    return CompositeType(name=name, attributes=attributes)


def _nullable_of(entry: dict[str, Any], owner: str, schema_path: str | None) -> bool:
    nullable = entry.get("nullable", True)
    if not isinstance(nullable, bool):
        raise SchemaValidationError(
            f"'nullable' must be true or false, got {nullable!r}",
            schema_path,
            field=f"{owner}.{entry['name']}",
        )
    return nullable


def _table_from(entry: Any, schema_path: str | None) -> Table:
    name = _name_of(entry, "table", schema_path)
    columns = tuple(
        Column(
            name=_name_of(raw, "column", schema_path),
            udt_name=_type_of(raw, name, schema_path),
            is_nullable=_nullable_of(raw, name, schema_path),
        )
        for raw in _section(entry, "columns", schema_path)
    )
    return Table(name=name, columns=columns)


def schema_from_mapping(data: dict[str, Any], schema_path: str | None = None) -> Schema:
    """Build a Schema from a parsed schema document.

    Args:
        data: Mapping with optional ``enums``, ``composite_types`` and
            ``tables`` lists.
        schema_path: Path of the source document, used in error messages.

    Returns:
        The schema, with entities in document order.

    Raises:
        SchemaValidationError: If an entry is malformed.
    """
    return Schema(
        enums=tuple(_enum_from(e, schema_path) for e in _section(data, "enums", schema_path)),
        composite_types=tuple(
            _composite_from(c, schema_path)
            for c in _section(data, "composite_types", schema_path)
        ),
        tables=tuple(_table_from(t, schema_path) for t in _section(data, "tables", schema_path)),
    )


def collect_schema_paths(inputs: Sequence[Path]) -> list[Path]:
    """Collect all schema files from the given inputs.

    Args:
        inputs: Paths to schema files or directories.

    Returns:
        List of unique, resolved schema file paths.

    Raises:
        FileNotFoundError: If any input path doesn't exist.
    """

    def _iter_paths() -> Iterator[Path]:
        for raw in inputs:
            path = raw.resolve()
            if not path.exists():
                raise FileNotFoundError(f"Schema path '{raw}' does not exist")
            if path.is_dir():
                yield from sorted(
                    p
                    for p in path.iterdir()
                    if p.is_file() and p.suffix in (".yaml", ".yml")
                )
            else:
                yield path

    # Use dict to preserve order while deduplicating
    seen: dict[Path, None] = {}
    for path in _iter_paths():
        seen.setdefault(path, None)

    return list(seen.keys())


class YamlSchemaProvider:
    """Schema provider reading one or more YAML schema documents.

    Documents are merged in path order. File access runs in a worker thread
    so the generator's single await point stays non-blocking.
    """

    def __init__(self, paths: Sequence[Path], cache: SchemaCache | None = None) -> None:
        self.paths = list(paths)
        self.cache = cache if cache is not None else get_global_cache()

    def _load(self) -> Schema:
        schema = Schema()
        for path in collect_schema_paths(self.paths):
            schema = schema.merge(self.cache.get(path))
        return schema

    async def get_schema(self) -> Schema:
        return await asyncio.to_thread(self._load)


# Global cache instance for convenience
_global_cache: SchemaCache | None = None


def get_global_cache() -> SchemaCache:
    """Get the global schema cache instance."""
    global _global_cache
    if _global_cache is None:
        _global_cache = SchemaCache()
    return _global_cache
