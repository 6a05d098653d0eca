"""
Configuration for statrace.

Defines VizSettings, a frozen dataclass carrying runtime configuration for loading and
animating views. Defaults are sourced from statrace.core.constants (the single source of
truth).

Source of truth
- statrace.core.constants timings (DEFAULT_INTERVAL_MS, ENTER/EXIT_DURATION_MS), layout
  defaults (BAR_HEADROOM, TOP_N), and geography URLs.

Import DAG discipline
- Depends on stdlib, matplotlib (colormap names), and statrace.core.constants.
- Does not import higher layers (engine, viz, app).

Notes
- Precedence: environment (STATRACE_*) > TOML (statrace.toml or [tool.statrace.viz]) > defaults.
- Unparseable values are ignored and the previous value is kept.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import matplotlib

from statrace.core.constants import (
    BAR_HEADROOM,
    COLOR_SCHEME,
    DEFAULT_INTERVAL_MS,
    ENTER_DURATION_MS,
    EXIT_DURATION_MS,
    GEO_FALLBACK_URL,
    GEO_PRIMARY_URL,
    MAX_INTERVAL_MS,
    MIN_INTERVAL_MS,
    TOP_N,
)

from .errors import ConfigError

_INT_KEYS = (
    "interval_ms",
    "min_interval_ms",
    "max_interval_ms",
    "enter_duration_ms",
    "exit_duration_ms",
    "top_n",
)
_FLOAT_KEYS = ("data_timeout_s", "geo_timeout_s", "bar_headroom")
_STR_KEYS = ("data_path", "geo_primary_url", "geo_fallback_url", "color_scheme")


@dataclass(frozen=True)
class VizSettings:
    """
    Runtime settings for statrace views.

    Attributes:
        data_path (str): CSV path or URL loaded by every view.
        data_timeout_s (float): Request timeout when data_path is a URL.
        geo_primary_url (str): Topology source tried first for map views.
        geo_fallback_url (str): Single fallback topology source.
        geo_timeout_s (float): Per-request timeout for geography fetches.
        interval_ms (int): Initial milliseconds per animation tick.
        min_interval_ms (int): Lower bound of the speed control.
        max_interval_ms (int): Upper bound of the speed control.
        enter_duration_ms (int): Enter/update transition duration.
        exit_duration_ms (int): Exit transition duration (shorter than enter).
        bar_headroom (float): Multiplier applied to the max value for ranking axes.
        top_n (int): Bars shown by the dashboard's ranking chart.
        color_scheme (str): Matplotlib sequential colormap name.

    Examples:
        >>> from statrace.io import VizSettings
        >>> VizSettings(interval_ms=300).interval_ms
        300
    """

    data_path: str = "data-table.csv"
    data_timeout_s: float = 30.0
    geo_primary_url: str = GEO_PRIMARY_URL
    geo_fallback_url: str = GEO_FALLBACK_URL
    geo_timeout_s: float = 10.0
    interval_ms: int = DEFAULT_INTERVAL_MS
    min_interval_ms: int = MIN_INTERVAL_MS
    max_interval_ms: int = MAX_INTERVAL_MS
    enter_duration_ms: int = ENTER_DURATION_MS
    exit_duration_ms: int = EXIT_DURATION_MS
    bar_headroom: float = BAR_HEADROOM
    top_n: int = TOP_N
    color_scheme: str = COLOR_SCHEME

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: VizSettings, cfg: dict[str, Any] | None) -> VizSettings:
        """Apply a loose config mapping onto VizSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base
        for key in _STR_KEYS:
            if key in cfg and isinstance(cfg[key], str) and cfg[key].strip():
                s = replace(s, **{key: cfg[key].strip()})
        for key in _INT_KEYS:
            if key in cfg:
                try:
                    s = replace(s, **{key: int(cfg[key])})
                except (TypeError, ValueError):
                    pass
        for key in _FLOAT_KEYS:
            if key in cfg:
                try:
                    s = replace(s, **{key: float(cfg[key])})
                except (TypeError, ValueError):
                    pass
        return s

    @classmethod
    def from_env(cls, base: VizSettings | None = None, prefix: str = "STATRACE_") -> VizSettings:
        """
        Build VizSettings from environment variables. Precedence is env > base > defaults.

        Recognized variables are the upper-cased field names with the prefix, e.g.
        STATRACE_DATA_PATH, STATRACE_INTERVAL_MS, STATRACE_GEO_FALLBACK_URL.
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in (*_STR_KEYS, *_INT_KEYS, *_FLOAT_KEYS):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> VizSettings:
        """
        Build VizSettings from a TOML file.

        Search order when `path` is None:
            1) ./statrace.toml (with either a [viz] table or direct keys)
            2) ./pyproject.toml under [tool.statrace.viz]

        Raises:
            ConfigError: If an explicit `path` does not exist or is not valid TOML.
        """
        s = cls()

        cand: list[Path] = []
        if path is not None:
            p = Path(path)
            if not p.exists():
                raise ConfigError(f"config file not found: {p}")
            cand.append(p)
        else:
            cand.append(Path.cwd() / "statrace.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            try:
                with p.open("rb") as fh:
                    data = tomllib.load(fh)
            except tomllib.TOMLDecodeError as exc:
                if path is not None:
                    raise ConfigError(f"invalid TOML in {p}: {exc}") from exc
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("statrace", {}).get("viz") if isinstance(tool, dict) else None
            elif isinstance(data.get("viz"), dict):
                cfg = data["viz"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> VizSettings:
        """
        Load VizSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults.

        Returns:
            VizSettings

        Raises:
            ConfigError: If the merged settings are inconsistent (see validate()).
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        s.validate()
        return s

    def validate(self) -> None:
        """Raise ConfigError when settings cannot drive a player."""
        if self.min_interval_ms < 1 or self.min_interval_ms > self.max_interval_ms:
            raise ConfigError(
                f"invalid interval bounds: {self.min_interval_ms}..{self.max_interval_ms}"
            )
        if not self.min_interval_ms <= self.interval_ms <= self.max_interval_ms:
            raise ConfigError(
                f"interval_ms={self.interval_ms} outside "
                f"{self.min_interval_ms}..{self.max_interval_ms}"
            )
        if self.color_scheme not in matplotlib.colormaps:
            raise ConfigError(f"unknown color_scheme: {self.color_scheme!r}")
        if self.data_timeout_s <= 0 or self.geo_timeout_s <= 0:
            raise ConfigError("fetch timeouts must be > 0")
        if self.exit_duration_ms > self.enter_duration_ms:
            raise ConfigError("exit_duration_ms must not exceed enter_duration_ms")
        if self.bar_headroom < 1.0:
            raise ConfigError("bar_headroom must be >= 1.0")
        if self.top_n < 1:
            raise ConfigError("top_n must be >= 1")

    def clamp_interval(self, ms: int) -> int:
        """Clamp a requested speed into [min_interval_ms, max_interval_ms]."""
        return max(self.min_interval_ms, min(self.max_interval_ms, int(ms)))
