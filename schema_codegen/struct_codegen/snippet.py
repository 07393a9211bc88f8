"""Accumulation of the source text generated for one schema entity."""

from __future__ import annotations

from dataclasses import dataclass, field

from .types import RustType, local_references, required_imports


@dataclass(frozen=True, slots=True)
class Snippet:
    """Final source of one generated declaration, header included."""

    id: str
    code: str
    imports: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()


@dataclass(slots=True)
class SnippetBuilder:
    """Mutable accumulator for a declaration under construction.

    The body is appended to line by line while the entity is generated;
    ``finalize`` produces a sealed ``Snippet`` without touching the body.
    """

    id: str
    code: str = ""
    imports: set[str] = field(default_factory=set)
    dependencies: set[str] = field(default_factory=set)

    def push(self, text: str) -> None:
        self.code += text

    def push_line(self, line: str = "") -> None:
        self.code += f"{line}\n"

    def add_import(self, path: str) -> None:
        self.imports.add(path)

    def add_dependency(self, name: str) -> None:
        # A declaration never imports itself
        if name != self.id:
            self.dependencies.add(name)

    def add_type(self, rust_type: RustType) -> None:
        """Record the imports and dependencies a field type needs."""
        for path in required_imports(rust_type):
            self.add_import(path)
        for name in local_references(rust_type):
            self.add_dependency(name)

    def header(self) -> str:
        """``use`` lines for the collected imports and dependencies, sorted."""
        lines = [f"use {path};" for path in sorted(self.imports)]
        lines.extend(f"use super::{name};" for name in sorted(self.dependencies))
        if not lines:
            return ""
        return "\n".join(lines) + "\n\n"

    def finalize(self) -> Snippet:
        """Seal the accumulated body behind its header block."""
        return Snippet(
            id=self.id,
            code=self.header() + self.code,
            imports=tuple(sorted(self.imports)),
            dependencies=tuple(sorted(self.dependencies)),
        )
