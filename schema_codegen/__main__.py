#!/usr/bin/env python3
"""
Command line entry point for schema-codegen.

Usage:
    python -m schema_codegen <schema paths> [options]

Examples:
    python -m schema_codegen schemas/ --singular --framework sqlx
    python -m schema_codegen schemas/users.yaml --out-dir src/generated
"""

from __future__ import annotations

import sys

from schema_codegen.struct_codegen import main as struct_main


def main(argv: list[str] | None = None) -> int:
    """Run the struct generator and translate SystemExit into an exit code."""
    try:
        struct_main(argv)
        return 0
    except SystemExit as e:
        if e.code is None or isinstance(e.code, int):
            return e.code or 0
        print(e.code, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
