"""Summary statistics over a parsed GCModel."""

from __future__ import annotations

from datetime import datetime
from statistics import mean, median

from pydantic import BaseModel, Field

from shenandoah_log.model import (
    EventCategory,
    GCEvent,
    GCModel,
    KilobytesValue,
    SecondsValue,
)


class PauseStatistics(BaseModel):
    """Duration distribution for one group of events."""

    name: str
    count: int
    concurrent: bool = False
    total_seconds: SecondsValue = 0.0
    avg_seconds: SecondsValue = 0.0
    median_seconds: SecondsValue = 0.0
    p95_seconds: SecondsValue = 0.0
    p99_seconds: SecondsValue = 0.0
    max_seconds: SecondsValue = 0.0


class GCSummary(BaseModel):
    """Aggregated view of a Shenandoah log."""

    log_format: str | None
    total_log_lines: int
    event_count: int
    pause_count: int
    concurrent_count: int
    events_with_memory: int

    overall_pauses: PauseStatistics
    per_type: list[PauseStatistics] = Field(default_factory=list)
    total_concurrent_seconds: SecondsValue = 0.0

    peak_post_used_kb: KilobytesValue | None = None
    peak_total_kb: KilobytesValue | None = None

    first_timestamp: SecondsValue | None = None
    last_timestamp: SecondsValue | None = None
    first_datestamp: datetime | None = None
    last_datestamp: datetime | None = None


def runs_concurrently(event: GCEvent) -> bool:
    """Concurrent variant, or a concurrent phase logged without heap numbers."""
    return event.is_concurrent or event.event_type.category is EventCategory.CONCURRENT


def percentile_sorted(sorted_data: list[float], pct: float) -> float:
    """Calculate percentile from a pre-sorted list."""
    if not sorted_data:
        return 0.0
    k = (len(sorted_data) - 1) * (pct / 100)
    f = int(k)
    c = k - f
    if f + 1 < len(sorted_data):
        return sorted_data[f] + c * (sorted_data[f + 1] - sorted_data[f])
    return sorted_data[f]


def pause_statistics(
    name: str, events: list[GCEvent], concurrent: bool = False
) -> PauseStatistics:
    pauses = sorted(e.pause_seconds for e in events)
    if not pauses:
        return PauseStatistics(name=name, count=0, concurrent=concurrent)
    return PauseStatistics(
        name=name,
        count=len(pauses),
        concurrent=concurrent,
        total_seconds=sum(pauses),
        avg_seconds=mean(pauses),
        median_seconds=median(pauses),
        p95_seconds=percentile_sorted(pauses, 95),
        p99_seconds=percentile_sorted(pauses, 99),
        max_seconds=pauses[-1],
    )


def build_summary(model: GCModel, total_log_lines: int) -> GCSummary:
    """Build a GCSummary; events keep the order they were read in."""
    events = list(model)
    concurrent_events = [e for e in events if runs_concurrently(e)]
    pause_events = [e for e in events if not runs_concurrently(e)]
    with_memory = [e for e in events if e.has_memory]

    # Group by type name, first occurrence wins the slot
    by_type: dict[str, list[GCEvent]] = {}
    for event in events:
        by_type.setdefault(event.type_name, []).append(event)
    per_type = [
        pause_statistics(name, group, concurrent=all(runs_concurrently(e) for e in group))
        for name, group in by_type.items()
    ]
    per_type.sort(key=lambda s: (s.concurrent, -s.total_seconds))

    timestamps = [e.timestamp for e in events if e.timestamp is not None]
    datestamps = [e.datestamp for e in events if e.datestamp is not None]
    post_used = [e.post_used_kb for e in with_memory if e.post_used_kb is not None]
    totals = [e.total_kb for e in with_memory if e.total_kb is not None]

    return GCSummary(
        log_format=model.format.value if model.format else None,
        total_log_lines=total_log_lines,
        event_count=len(events),
        pause_count=len(pause_events),
        concurrent_count=len(concurrent_events),
        events_with_memory=len(with_memory),
        overall_pauses=pause_statistics("All pauses", pause_events),
        per_type=per_type,
        total_concurrent_seconds=sum(e.pause_seconds for e in concurrent_events),
        peak_post_used_kb=max(post_used, default=None),
        peak_total_kb=max(totals, default=None),
        first_timestamp=timestamps[0] if timestamps else None,
        last_timestamp=timestamps[-1] if timestamps else None,
        first_datestamp=datestamps[0] if datestamps else None,
        last_datestamp=datestamps[-1] if datestamps else None,
    )
