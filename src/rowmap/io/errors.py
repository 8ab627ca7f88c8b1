"""
Custom exceptions for the rowmap.io module.

Purpose
- Provide IO-layer specific error types for schema files, data files and settings.
- Keep rowmap.core as the source of truth for compile-time errors (see
  rowmap.core.errors); those propagate through this layer unchanged.

Notes
- These exceptions do not perform any IO and are stdlib-only.
"""

from __future__ import annotations


class RowMapIoError(Exception):
    """
    Base class for IO-related errors in rowmap.io.

    Notes:
        Use this as a catch-all for IO-layer failures, distinct from rowmap.core errors.
    """


class RowMapConfigError(RowMapIoError):
    """
    Raised when configuration is invalid.

    Examples:
        - Unknown log level
        - Unreadable explicit settings file
    """


class SchemaFileError(RowMapIoError):
    """
    Raised when a schema file is missing, is not valid TOML, or does not match
    the structure layout ([[structures]] with [[structures.fields]]).
    """


class DataLoadError(RowMapIoError):
    """Raised when a data file cannot be read into a DataFrame."""
