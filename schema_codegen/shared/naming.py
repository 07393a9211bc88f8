"""Naming utilities for code generation."""

from __future__ import annotations

import re
from functools import lru_cache

RUST_KEYWORDS: frozenset[str] = frozenset({
    "as",
    "async",
    "await",
    "break",
    "const",
    "continue",
    "crate",
    "dyn",
    "else",
    "enum",
    "extern",
    "false",
    "fn",
    "for",
    "if",
    "impl",
    "in",
    "let",
    "loop",
    "match",
    "mod",
    "move",
    "mut",
    "pub",
    "ref",
    "return",
    "self",
    "Self",
    "static",
    "struct",
    "super",
    "trait",
    "true",
    "type",
    "union",
    "unsafe",
    "use",
    "where",
    "while",
})

# Keywords that cannot be written as raw identifiers
_RESERVED_PATH_KEYWORDS: frozenset[str] = frozenset({"crate", "self", "Self", "super"})

# Common irregular plurals
_IRREGULAR_PLURALS: dict[str, str] = {
    "children": "child",
    "people": "person",
    "men": "man",
    "women": "woman",
    "mice": "mouse",
    "geese": "goose",
    "teeth": "tooth",
    "feet": "foot",
    "data": "datum",
    "criteria": "criterion",
    "analyses": "analysis",
    "indices": "index",
    "appendices": "appendix",
    "matrices": "matrix",
    "vertices": "vertex",
    "statuses": "status",
    "buses": "bus",
    "bonuses": "bonus",
    "campuses": "campus",
    "viruses": "virus",
    "movies": "movie",
}

# Words whose plural and singular forms are the same
_UNCOUNTABLE: frozenset[str] = frozenset({
    "series",
    "species",
    "news",
    "metadata",
    "information",
    "equipment",
    "settings",
})

# Endings that mark a word as already singular
_SINGULAR_ENDINGS: tuple[str, ...] = ("ss", "us", "is")


def _irregular_singular(word: str) -> str | None:
    singular = _IRREGULAR_PLURALS.get(word.lower())
    if singular is None:
        return None
    # Preserve original case pattern
    if word[0].isupper():
        return singular.capitalize()
    return singular


def _strip_plural_suffix(word: str) -> str:
    lower = word.lower()
    # Apply rules in order of specificity
    if lower.endswith("ies") and len(word) > 3:
        return word[:-3] + ("Y" if word[-1].isupper() else "y")
    if lower.endswith("sses") and len(word) > 4:
        return word[:-2]
    if lower.endswith(("xes", "zes")) and len(word) > 3:
        return word[:-2]
    if lower.endswith(("ches", "shes")) and len(word) > 4:
        return word[:-2]
    if lower.endswith(_SINGULAR_ENDINGS):
        return word
    if lower.endswith("s") and len(word) > 1:
        return word[:-1]
    return word


def _singularize_word(word: str) -> str:
    if word.lower() in _UNCOUNTABLE:
        return word
    irregular = _irregular_singular(word)
    if irregular is not None:
        return irregular

    stripped = _strip_plural_suffix(word)
    # A doubled plural such as "datas" reduces to an irregular plural; finish
    # the job so a second pass is a no-op.
    return _irregular_singular(stripped) or stripped


@lru_cache(maxsize=1024)
def singularize(name: str) -> str:
    """Convert a plural name to singular form.

    Only the last word of a snake_case or kebab-case name is changed, so
    ``user_accounts`` becomes ``user_account``. Names that are already
    singular, or too ambiguous to tell, are returned unchanged.
    """
    match = re.search(r"[A-Za-z]+$", name)
    if match is None:
        return name
    head, word = name[: match.start()], match.group()
    # Split camelCase tails so only the final word is changed
    camel = re.search(r"[A-Z][a-z]+$", word)
    if camel is not None and camel.start() > 0:
        head, word = head + word[: camel.start()], camel.group()
    return head + _singularize_word(word)


@lru_cache(maxsize=1024)
def to_pascal_case(value: str) -> str:
    """Convert a string to PascalCase.

    Examples:
        >>> to_pascal_case("hello_world")
        'HelloWorld'
        >>> to_pascal_case("past-due")
        'PastDue'
        >>> to_pascal_case("helloWorld")
        'HelloWorld'
    """
    # Handle already camelCase/PascalCase by inserting underscores before caps
    value = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", value)

    parts = [part for part in re.split(r"[^A-Za-z0-9]+", value) if part]
    return "".join(part[0].upper() + part[1:].lower() for part in parts)


@lru_cache(maxsize=1024)
def to_snake_case(value: str) -> str:
    """Convert a string to snake_case.

    Examples:
        >>> to_snake_case("HelloWorld")
        'hello_world'
        >>> to_snake_case("hello-world")
        'hello_world'
    """
    # Insert underscore before uppercase letters
    value = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", value)
    # Replace hyphens and multiple underscores
    value = value.replace("-", "_")
    value = re.sub(r"_+", "_", value)
    return value.lower().strip("_")


@lru_cache(maxsize=1024)
def type_name(value: str) -> str:
    """PascalCase a schema name into a valid Rust type or variant name."""
    name = to_pascal_case(value)
    if not name:
        return "_"
    if name[0].isdigit():
        return f"_{name}"
    return name


def declaration_name(raw_name: str, singular: bool = False) -> str:
    """Name of the Rust declaration generated for a table or composite type.

    Args:
        raw_name: Name as it appears in the schema.
        singular: Singularize the name before case conversion.

    Returns:
        The PascalCase declaration name.
    """
    if singular:
        raw_name = singularize(raw_name)
    return type_name(raw_name)


@lru_cache(maxsize=1024)
def sanitize_module_name(value: str) -> str:
    """Sanitize a declaration name for use as a Rust module name."""
    module = to_snake_case(value)
    if module in RUST_KEYWORDS:
        return f"{module}_"
    return module


@lru_cache(maxsize=1024)
def sanitize_field_name(value: str) -> str:
    """Sanitize a column or attribute name for use as a Rust field name."""
    sanitized = re.sub(r"[^A-Za-z0-9_]", "_", value)
    if sanitized and sanitized[0].isdigit():
        sanitized = f"_{sanitized}"
    if sanitized in _RESERVED_PATH_KEYWORDS:
        return f"{sanitized}_"
    if sanitized in RUST_KEYWORDS:
        return f"r#{sanitized}"
    return sanitized
