"""Latency records and their summary statistics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

_log = logging.getLogger(__name__)

_NS_PER_SECOND = 1_000_000_000
_NS_PER_MINUTE = 60 * _NS_PER_SECOND


@dataclass(frozen=True)
class PingPongLog:
    """Latencies of one Pong event, in seconds."""

    created_to_mine: float
    mine_to_backend: float
    created_to_backend: float


@dataclass(frozen=True)
class DurationStats:
    """Summary of a set of durations, in seconds."""

    count: int
    maximum: float
    minimum: float
    p90: float
    p95: float
    average: float


def summarize(durations: Sequence[float]) -> DurationStats:
    """Count, extremes, 90th and 95th percentile and mean of ``durations``."""
    ordered = sorted(durations)
    if not ordered:
        raise ValueError("no durations to summarize")
    last = len(ordered) - 1
    p90_index = min(int(len(ordered) * 0.90), last)
    p95_index = min(int(len(ordered) * 0.95), last)
    return DurationStats(
        count=len(ordered),
        maximum=ordered[-1],
        minimum=ordered[0],
        p90=ordered[p90_index],
        p95=ordered[p95_index],
        average=sum(ordered) / len(ordered),
    )


def _fraction(value: int, scale: int) -> str:
    whole, rest = divmod(value, scale)
    if not rest:
        return str(whole)
    width = len(str(scale)) - 1
    return f"{whole}.{str(rest).rjust(width, '0').rstrip('0')}"


def format_duration(seconds: float) -> str:
    """Render a duration like "1h2m3.5s", "250ms" or "12ns"."""
    nanos = round(seconds * _NS_PER_SECOND)
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)
    if nanos < _NS_PER_SECOND:
        if nanos < 1_000:
            return f"{sign}{nanos}ns"
        if nanos < 1_000_000:
            return f"{sign}{_fraction(nanos, 1_000)}µs"
        return f"{sign}{_fraction(nanos, 1_000_000)}ms"
    text = _fraction(nanos % _NS_PER_MINUTE, _NS_PER_SECOND) + "s"
    minutes = nanos // _NS_PER_MINUTE
    if minutes:
        hours, minutes = divmod(minutes, 60)
        text = f"{minutes}m{text}"
        if hours:
            text = f"{hours}h{text}"
    return sign + text


def format_stats(name: str, durations: Sequence[float]) -> str:
    """A titled block of statistics, or an empty string for no durations."""
    if not durations:
        return ""
    stats = summarize(durations)
    return (
        f"--- {name} Stats ---\n"
        f"Total count: {stats.count}\n"
        f"Max: {format_duration(stats.maximum)}\n"
        f"Min: {format_duration(stats.minimum)}\n"
        f"P90: {format_duration(stats.p90)}\n"
        f"P95: {format_duration(stats.p95)}\n"
        f"Average: {format_duration(stats.average)}\n"
        "\n"
    )


def report(logs: Sequence[PingPongLog]) -> str:
    """Statistics for the three latencies of every consumed Pong event."""
    if not logs:
        _log.info("No Pong events consumed, nothing to report.")
        return ""
    sections: List[str] = [
        format_stats("CreatedToMineDuration", [entry.created_to_mine for entry in logs]),
        format_stats("MineToBackendDuration", [entry.mine_to_backend for entry in logs]),
        format_stats("CreatedToBackendDuration", [entry.created_to_backend for entry in logs]),
    ]
    return "".join(sections)