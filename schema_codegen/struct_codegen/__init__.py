"""Struct Code Generator - Generates Rust type declarations from database schemas."""

from .main import (
    Generator,
    GeneratorOptions,
    ModuleSpec,
    TemplateContext,
    generate,
    write_snippets,
    main,
)
from .frameworks import (
    CodeEmitter,
    EntityKind,
    Framework,
    PlainEmitter,
    SqlxEmitter,
    emitter_for,
)
from .snippet import Snippet, SnippetBuilder
from .types import (
    CustomKind,
    RustType,
    TypeKind,
    classify_custom,
    local_references,
    map_udt_name,
    required_imports,
)

__all__ = [
    "Generator",
    "GeneratorOptions",
    "ModuleSpec",
    "TemplateContext",
    "generate",
    "write_snippets",
    "main",
    "CodeEmitter",
    "EntityKind",
    "Framework",
    "PlainEmitter",
    "SqlxEmitter",
    "emitter_for",
    "Snippet",
    "SnippetBuilder",
    "CustomKind",
    "RustType",
    "TypeKind",
    "classify_custom",
    "local_references",
    "map_udt_name",
    "required_imports",
]
