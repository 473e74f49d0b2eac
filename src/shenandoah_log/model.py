"""Event model for Shenandoah GC logs.

Events are immutable once built. ``GCModel`` is the ordered, append-only
sequence the reader fills and the CLI summarizes.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from enum import Enum
from typing import TypeAlias

from pydantic import BaseModel, ConfigDict, model_validator

# ============================================================
# TYPE ALIASES
# ============================================================

KilobytesValue: TypeAlias = int
SecondsValue: TypeAlias = float

# ============================================================
# EVENT TYPES
# ============================================================


class EventCategory(str, Enum):
    PAUSE = "pause"
    CONCURRENT = "concurrent"
    OTHER = "other"


class EventType(BaseModel):
    """A named GC phase and the category it belongs to."""

    model_config = ConfigDict(frozen=True)

    name: str
    category: EventCategory


def _pause(name: str) -> tuple[str, EventType]:
    return name, EventType(name=name, category=EventCategory.PAUSE)


def _concurrent(name: str) -> tuple[str, EventType]:
    return name, EventType(name=name, category=EventCategory.CONCURRENT)


EVENT_TYPES: dict[str, EventType] = dict(
    [
        _pause("Pause Init Mark"),
        _pause("Pause Init Mark (process weakrefs)"),
        _pause("Pause Init Mark (unload classes)"),
        _pause("Pause Init Mark (process weakrefs) (unload classes)"),
        _pause("Pause Final Mark"),
        _pause("Pause Final Mark (process weakrefs)"),
        _pause("Pause Final Mark (unload classes)"),
        _pause("Pause Final Mark (process weakrefs) (unload classes)"),
        _pause("Pause Init Update Refs"),
        _pause("Pause Final Update Refs"),
        _pause("Pause Final Evac"),
        _pause("Pause Full"),
        _pause("Pause Full (Allocation Failure)"),
        _pause("Pause Full (System.gc())"),
        _pause("Pause Degenerated GC (Mark)"),
        _pause("Pause Degenerated GC (Evacuation)"),
        _pause("Pause Degenerated GC (Update Refs)"),
        _pause("Pause Degenerated GC (Outside of Cycle)"),
        _concurrent("Concurrent marking"),
        _concurrent("Concurrent marking (process weakrefs)"),
        _concurrent("Concurrent marking (unload classes)"),
        _concurrent("Concurrent marking (process weakrefs) (unload classes)"),
        _concurrent("Concurrent evacuation"),
        _concurrent("Concurrent reset"),
        _concurrent("Concurrent reset bitmaps"),
        _concurrent("Concurrent update references"),
        _concurrent("Concurrent precleaning"),
        _concurrent("Concurrent cleanup"),
        _concurrent("Concurrent uncommit"),
    ]
)


def lookup_event_type(name: str) -> EventType:
    """Resolve a phase name; unknown names fall back to an OTHER type."""
    name = name.strip()
    event_type = EVENT_TYPES.get(name)
    if event_type is None:
        return EventType(name=name, category=EventCategory.OTHER)
    return event_type


# ============================================================
# EVENTS
# ============================================================


class GCEvent(BaseModel):
    """A stop-the-world (pausing) GC event.

    Carries either an elapsed ``timestamp`` in seconds or an absolute
    ``datestamp``, never both. Memory fields are in KB and are either all
    present or all absent.
    """

    model_config = ConfigDict(frozen=True)

    event_type: EventType
    pause_seconds: SecondsValue
    timestamp: SecondsValue | None = None
    datestamp: datetime | None = None

    pre_used_kb: KilobytesValue | None = None
    post_used_kb: KilobytesValue | None = None
    total_kb: KilobytesValue | None = None

    line_number: int | None = None

    @model_validator(mode="after")
    def _check_invariants(self) -> GCEvent:
        if (self.timestamp is None) == (self.datestamp is None):
            raise ValueError("exactly one of timestamp or datestamp must be set")
        memory = (self.pre_used_kb, self.post_used_kb, self.total_kb)
        if any(value is None for value in memory) and any(value is not None for value in memory):
            raise ValueError("pre_used_kb, post_used_kb and total_kb must be set together")
        return self

    @property
    def has_datestamp(self) -> bool:
        return self.datestamp is not None

    @property
    def has_memory(self) -> bool:
        return self.total_kb is not None

    @property
    def is_concurrent(self) -> bool:
        return False

    @property
    def type_name(self) -> str:
        return self.event_type.name

    @property
    def extended_type(self) -> str:
        """Type name, followed by the heap delta when memory is known."""
        if not self.has_memory:
            return self.event_type.name
        return (
            f"{self.event_type.name} "
            f"{self.pre_used_kb}K->{self.post_used_kb}K({self.total_kb}K)"
        )


class ConcurrentGCEvent(GCEvent):
    """A GC phase running alongside the application."""

    @property
    def is_concurrent(self) -> bool:
        return True


# ============================================================
# MODEL
# ============================================================


class LogFormat(str, Enum):
    RED_HAT_SHENANDOAH_GC = "Red Hat Shenandoah GC"


class GCModel:
    """Ordered, append-only collection of parsed GC events."""

    def __init__(self) -> None:
        self._events: list[GCEvent] = []
        self.format: LogFormat | None = None

    def set_format(self, log_format: LogFormat) -> None:
        self.format = log_format

    def add(self, event: GCEvent) -> None:
        self._events.append(event)

    @property
    def events(self) -> tuple[GCEvent, ...]:
        return tuple(self._events)

    @property
    def pause_events(self) -> list[GCEvent]:
        return [e for e in self._events if not e.is_concurrent]

    @property
    def concurrent_events(self) -> list[GCEvent]:
        return [e for e in self._events if e.is_concurrent]

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[GCEvent]:
        return iter(self._events)
