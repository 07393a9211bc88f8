"""Custom exceptions for schema code generation."""

from __future__ import annotations


class SchemaError(Exception):
    """Base exception for schema-related errors."""

    def __init__(self, message: str, schema_path: str | None = None) -> None:
        self.schema_path = schema_path
        full_message = f"{message}" if not schema_path else f"[{schema_path}] {message}"
        super().__init__(full_message)


class SchemaValidationError(SchemaError):
    """Raised when a schema document has the wrong shape."""

    def __init__(
        self,
        message: str,
        schema_path: str | None = None,
        field: str | None = None,
    ) -> None:
        self.field = field
        if field:
            message = f"Field '{field}': {message}"
        super().__init__(message, schema_path)


class FrameworkError(ValueError):
    """Raised when an unknown persistence framework is requested."""

    def __init__(self, framework: str, available: list[str] | None = None) -> None:
        self.framework = framework
        message = f"Unknown framework '{framework}'"
        if available:
            message += f" (expected one of: {', '.join(available)})"
        super().__init__(message)
