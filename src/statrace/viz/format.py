"""
Number formatting for axes, value labels, headlines, and progress text.

Counts use compact suffixes on axes (1.2M, 5k) and thousands separators in labels;
rates use one decimal on axes and two in labels.
"""

from __future__ import annotations

from statrace.core.grammar import Metric, metric_from_value
from statrace.engine.animation import AnimationClock
from statrace.engine.projection import Summary

__all__ = [
    "format_tick",
    "format_trend_tick",
    "format_value",
    "format_headline",
    "format_trend_headline",
    "progress_text",
]


def format_tick(value: float, metric: Metric | str) -> str:
    """
    Axis tick for a ranking (bar) axis.

    Examples:
        >>> format_tick(1_250_000, "deaths"), format_tick(5000, "deaths"), format_tick(12, "deaths")
        ('1.2M', '5k', '12')
        >>> format_tick(12.345, "rate")
        '12.3'
    """
    m = metric_from_value(metric)
    if m.is_count:
        if value >= 1_000_000:
            return f"{value / 1_000_000:.1f}M"
        if value >= 1000:
            return f"{value / 1000:.0f}k"
        return f"{value:g}"
    return f"{value:.1f}"


def format_trend_tick(value: float, metric: Metric | str) -> str:
    """Axis tick for a trend (line) value axis: 12.5k for counts, one decimal for rates."""
    m = metric_from_value(metric)
    if m.is_count:
        return f"{value / 1000:.1f}k" if value >= 1000 else f"{value:g}"
    return f"{value:.1f}"


def format_value(value: float, metric: Metric | str) -> str:
    """
    Value label / tooltip text.

    Examples:
        >>> format_value(12345, "deaths"), format_value(3.14159, "rate")
        ('12,345', '3.14')
    """
    m = metric_from_value(metric)
    if m.is_count:
        return f"{int(round(value)):,}"
    return f"{value:.2f}"


def format_headline(summary: Summary | None) -> str:
    """'Total: 1,234' for counts, 'Average: 12.34' for rates; empty without data."""
    if summary is None:
        return ""
    if summary.metric.is_count:
        return f"Total: {int(round(summary.total)):,}"
    return f"Average: {summary.mean:.2f}"


def format_trend_headline(summary: Summary | None) -> str:
    """Trend pages always show the average across the selection."""
    if summary is None:
        return ""
    if summary.metric.is_count:
        return f"Average: {summary.mean:.0f}"
    return f"Average: {summary.mean:.2f}"


def progress_text(clock: AnimationClock) -> str:
    """
    Examples:
        >>> progress_text(AnimationClock.initial(2014, 2023))
        'Year 1 of 10 (2014-2023)'
    """
    return (
        f"Year {clock.position} of {clock.length} "
        f"({clock.bounds_min}-{clock.bounds_max})"
    )
