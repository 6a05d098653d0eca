"""
Custom exceptions for the statrace.io module.

Purpose
- Provide IO-layer specific error types that map cleanly to responsibilities in statrace.io.
- Keep statrace.core as the source of truth for record validation errors (see
  statrace.core.errors).

Source of truth and boundaries
- statrace.core.errors.SchemaError is raised by the Record validators.
- statrace.io raises Io* errors for fetch/parse/config concerns:
  - LoadError: primary dataset unreachable or malformed (terminal, never retried).
  - GeoLoadError: geography unavailable after the fallback source also failed.
  - ConfigError: invalid or unsupported configuration.

Notes
- These exceptions do not perform any IO and are stdlib-only.
"""

from __future__ import annotations


class IoError(Exception):
    """
    Base class for IO-related errors in statrace.io.

    Notes:
        Use this as a catch-all for IO-layer failures, distinct from statrace.core errors.
    """


class LoadError(IoError):
    """
    Raised when the primary dataset cannot be fetched or parsed.

    Examples:
        - Source path/URL unreachable
        - Required column missing (Year, State, Deaths, Age Adjusted Rate)
        - Non-numeric metric field, or duplicate (entity, time_step) rows
    """


class GeoLoadError(IoError):
    """
    Raised when boundary data could not be fetched from either source.

    Notes:
        Recoverable at the view level: map views render a "map unavailable"
        placeholder while non-map views keep working.
    """


class ConfigError(IoError):
    """
    Raised when configuration is invalid or unsupported.

    Examples:
        - Explicit TOML path that does not exist
        - Interval bounds where min_interval_ms > max_interval_ms
    """
