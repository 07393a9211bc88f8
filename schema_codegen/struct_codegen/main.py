"""
Struct Code Generator - Generates Rust type declarations from database schemas.

One declaration is generated per schema entity:
- a Rust ``enum`` per enumerated type
- a ``struct`` per composite type
- a ``struct`` per table

Field types, ``use`` imports and references between generated declarations
are derived from the native column types. Framework-specific attributes are
supplied by the selected ``CodeEmitter``.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Iterable, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..shared import (
    CompositeType,
    EnumType,
    FrameworkError,
    Schema,
    SchemaError,
    SchemaProvider,
    Table,
    YamlSchemaProvider,
    collect_schema_paths,
    declaration_name,
    sanitize_field_name,
    sanitize_module_name,
    type_name,
)
from .frameworks import CodeEmitter, EntityKind, Framework, emitter_for
from .snippet import Snippet, SnippetBuilder
from .types import CustomKind, RustType, classify_custom, map_udt_name

logger = logging.getLogger(__name__)

# Template configuration
TEMPLATE_DIR: Final[Path] = Path(__file__).parent / "templates"

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


@dataclass(frozen=True, slots=True)
class GeneratorOptions:
    """Formatting options applied to the generated code.

    Attributes:
        singular: Use the singular form of table and composite type names
            for the generated structs.
        framework: Framework whose attributes decorate the declarations.
    """

    singular: bool = False
    framework: Framework = Framework.NONE

    def __post_init__(self) -> None:
        object.__setattr__(self, "framework", Framework.parse(self.framework))


def _check_unique_declarations(entries: Iterable[tuple[str, str]]) -> None:
    """Reject entities whose declarations or modules would overwrite each other.

    Args:
        entries: ``(source name, declaration name)`` pairs.

    Raises:
        SchemaError: If two entries share a declaration or module name.
    """
    by_name: dict[str, str] = {}
    by_module: dict[str, str] = {}
    for source, name in entries:
        module = sanitize_module_name(name)
        if name in by_name:
            raise SchemaError(
                f"'{by_name[name]}' and '{source}' both generate declaration '{name}'"
            )
        if module in by_module:
            raise SchemaError(
                f"'{by_module[module]}' and '{source}' both generate module '{module}'"
            )
        by_name[name] = source
        by_module[module] = source


class Generator:
    """Generates one Rust declaration per entity of a schema."""

    def __init__(
        self,
        options: GeneratorOptions | None,
        provider: SchemaProvider,
    ) -> None:
        self.options = options or GeneratorOptions()
        self.provider = provider
        self.emitter: CodeEmitter = emitter_for(self.options.framework)

    async def generate_code(self) -> list[Snippet]:
        """Fetch the schema and generate code for every entity in it.

        Returns:
            Final snippets for enums, composite types and tables, in
            schema order.

        Raises:
            Exception: Whatever the schema provider raises, unchanged.
        """
        schema = await self.provider.get_schema()
        logger.info(
            "Generating code for %d enum(s), %d composite type(s), %d table(s)",
            len(schema.enums),
            len(schema.composite_types),
            len(schema.tables),
        )
        return self.generate_from_schema(schema)

    def generate_from_schema(self, schema: Schema) -> list[Snippet]:
        """Generate snippets from a schema that has already been fetched."""
        names = self._declaration_names(schema)

        builders: list[SnippetBuilder] = []
        builders.extend(self._code_from_enum(e) for e in schema.enums)
        builders.extend(self._code_from_composite(c, names) for c in schema.composite_types)
        builders.extend(self._code_from_table(t, names) for t in schema.tables)

        raw_names = [
            *(e.name for e in schema.enums),
            *(c.name for c in schema.composite_types),
            *(t.name for t in schema.tables),
        ]
        _check_unique_declarations(zip(raw_names, (b.id for b in builders)))

        return [builder.finalize() for builder in builders]

    def format_name(self, name: str) -> str:
        """Declaration name of a table or composite type."""
        return declaration_name(name, self.options.singular)

    def _declaration_names(self, schema: Schema) -> dict[str, str]:
        """Map schema-level type names to the names of their declarations."""
        names: dict[str, str] = {}
        for enum in schema.enums:
            names.setdefault(enum.name, type_name(enum.name))
        for composite in schema.composite_types:
            names.setdefault(composite.name, self.format_name(composite.name))
        # Every table also defines a row type of the same name
        for table in schema.tables:
            names.setdefault(table.name, self.format_name(table.name))
        return names

    def _resolve(self, rust_type: RustType, names: dict[str, str]) -> RustType:
        """Point local custom types at the declarations generated for them."""

        def rename(name: str) -> str:
            if classify_custom(name) is not CustomKind.LOCAL:
                return name
            unqualified = name.rsplit(".", 1)[-1]
            return names.get(name) or names.get(unqualified) or type_name(unqualified)

        return rust_type.replace_custom(rename)

    def _start(self, kind: EntityKind, raw_name: str, name: str) -> SnippetBuilder:
        snippet = SnippetBuilder(name)
        for line in self.emitter.type_decoration(kind, raw_name):
            snippet.push_line(line)
        return snippet

    def _code_from_enum(self, enum: EnumType) -> SnippetBuilder:
        name = type_name(enum.name)
        logger.debug("Generating enum %s from %s", name, enum.name)
        snippet = self._start(EntityKind.ENUM, enum.name, name)

        snippet.push_line(f"pub enum {name} {{")
        for value in enum.values:
            rename = self.emitter.enum_value_attribute(value.name)
            if rename:
                snippet.push_line(f"    {rename}")
            snippet.push_line(f"    {type_name(value.name)},")
        snippet.push_line("}")
        return snippet

    def _code_from_composite(
        self, composite: CompositeType, names: dict[str, str]
    ) -> SnippetBuilder:
        name = self.format_name(composite.name)
        logger.debug("Generating composite struct %s from %s", name, composite.name)
        fields = (
            (attr.name, map_udt_name(attr.data_type)) for attr in composite.attributes
        )
        return self._code_from_struct(EntityKind.COMPOSITE, composite.name, name, fields, names)

    def _code_from_table(self, table: Table, names: dict[str, str]) -> SnippetBuilder:
        name = self.format_name(table.name)
        logger.debug("Generating table struct %s from %s", name, table.name)

        def fields() -> Iterable[tuple[str, RustType]]:
            for column in table.columns:
                rust_type = map_udt_name(column.udt_name)
                if column.is_nullable:
                    rust_type = rust_type.optional()
                yield column.name, rust_type

        return self._code_from_struct(EntityKind.TABLE, table.name, name, fields(), names)

    def _code_from_struct(
        self,
        kind: EntityKind,
        raw_name: str,
        name: str,
        fields: Iterable[tuple[str, RustType]],
        names: dict[str, str],
    ) -> SnippetBuilder:
        snippet = self._start(kind, raw_name, name)

        snippet.push_line(f"pub struct {name} {{")
        for field_name, rust_type in fields:
            rust_type = self._resolve(rust_type, names)
            snippet.add_type(rust_type)
            attribute = self.emitter.field_attribute(rust_type)
            if attribute:
                snippet.push_line(f"    {attribute}")
            sanitized = sanitize_field_name(field_name)
            rename = self.emitter.field_rename_attribute(kind, field_name, sanitized)
            if rename:
                snippet.push_line(f"    {rename}")
            snippet.push_line(f"    pub {sanitized}: {rust_type},")
        snippet.push_line("}")
        return snippet


@dataclass(frozen=True, slots=True)
class ModuleSpec:
    """A generated Rust module holding one declaration."""

    module_name: str
    declaration_name: str


@dataclass
class TemplateContext:
    """Template environment for the generated module index."""

    template_env: Environment = field(init=False)

    def __post_init__(self) -> None:
        self.template_env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            auto_reload=False,
        )
        self._mod_template = self.template_env.get_template("mod.rs.j2")

    @property
    def mod_template(self):
        return self._mod_template


def _write_mod_file(
    modules: Sequence[ModuleSpec],
    mod_path: Path,
    ctx: TemplateContext,
) -> None:
    """Write the mod.rs file for the generated modules."""
    ordered = sorted(modules, key=lambda item: item.module_name)
    rendered = ctx.mod_template.render(modules=ordered)
    mod_path.write_text(rendered, encoding="utf-8")


def write_snippets(snippets: Sequence[Snippet], output_dir: Path) -> int:
    """Write one ``.rs`` module per snippet plus a ``mod.rs`` index.

    Returns:
        Number of modules written.

    Raises:
        SchemaError: If two snippets map to the same module; nothing is
            written in that case.
    """
    _check_unique_declarations((snippet.id, snippet.id) for snippet in snippets)

    ctx = TemplateContext()
    output_dir.mkdir(parents=True, exist_ok=True)

    modules: list[ModuleSpec] = []
    for snippet in snippets:
        module_name = sanitize_module_name(snippet.id)
        (output_dir / f"{module_name}.rs").write_text(snippet.code, encoding="utf-8")
        modules.append(ModuleSpec(module_name=module_name, declaration_name=snippet.id))

    _write_mod_file(modules, output_dir / "mod.rs", ctx)
    return len(modules)


def generate(
    schema_paths: Sequence[Path],
    output_dir: Path | None = None,
    options: GeneratorOptions | None = None,
) -> list[Snippet]:
    """Generate Rust declarations from schema files.

    Args:
        schema_paths: Paths to schema YAML files.
        output_dir: Directory for generated modules; nothing is written
            when omitted.
        options: Generator options.

    Returns:
        The generated snippets.
    """
    generator = Generator(options, YamlSchemaProvider(schema_paths))
    snippets = asyncio.run(generator.generate_code())
    if output_dir is not None:
        write_snippets(snippets, output_dir)
    return snippets


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Generate Rust type declarations from database schema definitions",
    )
    parser.add_argument(
        "paths",
        type=Path,
        nargs="+",
        help="Schema file(s) or directories containing schema YAML files",
    )
    parser.add_argument(
        "--singular",
        action="store_true",
        help="Use singular struct names for tables and composite types",
    )
    parser.add_argument(
        "--framework",
        choices=[f.value for f in Framework],
        default=Framework.NONE.value,
        help="Framework whose attributes decorate the generated types",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=None,
        help="Write one module per declaration here instead of printing",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT, stream=sys.stderr)

    try:
        schema_paths = collect_schema_paths(args.paths)
        if not schema_paths:
            raise SystemExit("No schema files found")

        options = GeneratorOptions(singular=args.singular, framework=args.framework)
        output_dir = args.out_dir.resolve() if args.out_dir else None
        snippets = generate(schema_paths, output_dir, options)

        if output_dir is None:
            sys.stdout.write("\n".join(snippet.code for snippet in snippets))
        else:
            print(
                f"Generated {len(snippets)} declaration(s) from "
                f"{len(schema_paths)} schema file(s) into {output_dir}"
            )
    except (SchemaError, FrameworkError, FileNotFoundError) as e:
        raise SystemExit(f"Error: {e}") from e


if __name__ == "__main__":
    main()
