"""
Core exception types raised by record validation.

Provides typed exceptions for core-domain failures:
- SchemaError for invalid record fields (non-numeric metrics, blank entity names).

Notes:
    - This module uses only the Python standard library and has no side effects.
    - IO-layer failures (unreachable source, missing columns) are raised by
      statrace.io as LoadError; SchemaError is wrapped there with exception chaining.

Examples:
    >>> from statrace.core.errors import SchemaError
    >>> try:
    ...     raise SchemaError("deaths must be numeric")
    ... except ValueError as e:
    ...     msg = str(e)
    >>> "numeric" in msg
    True
"""

from __future__ import annotations

__all__ = [
    "SchemaError",
]


class SchemaError(ValueError):
    """Record-level validation failure (missing field, non-numeric metric, duplicate key)."""
