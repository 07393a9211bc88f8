"""Rust type declarations generated from database schema definitions."""

__version__ = "0.1.0"
