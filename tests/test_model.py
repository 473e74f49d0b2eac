"""Tests for the event model."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from shenandoah_log.model import (
    EVENT_TYPES,
    ConcurrentGCEvent,
    EventCategory,
    EventType,
    GCEvent,
    GCModel,
    LogFormat,
    lookup_event_type,
)


def test_lookup_known_names() -> None:
    assert lookup_event_type("Pause Init Mark").category is EventCategory.PAUSE
    assert lookup_event_type("Concurrent evacuation").category is EventCategory.CONCURRENT
    assert lookup_event_type("Pause Full (System.gc())") is EVENT_TYPES["Pause Full (System.gc())"]


def test_lookup_strips_whitespace() -> None:
    assert lookup_event_type("  Concurrent marking ") is EVENT_TYPES["Concurrent marking"]


def test_lookup_unknown_name_falls_back() -> None:
    event_type = lookup_event_type("Concurrent weak roots")
    assert event_type.category is EventCategory.OTHER
    assert event_type.name == "Concurrent weak roots"


def test_event_requires_exactly_one_time_origin() -> None:
    pause_type = lookup_event_type("Pause Init Mark")
    with pytest.raises(ValidationError):
        GCEvent(event_type=pause_type, pause_seconds=0.001)
    with pytest.raises(ValidationError):
        GCEvent(
            event_type=pause_type,
            pause_seconds=0.001,
            timestamp=1.0,
            datestamp=datetime(2017, 8, 30, tzinfo=timezone.utc),
        )


def test_event_memory_is_all_or_nothing() -> None:
    with pytest.raises(ValidationError):
        GCEvent(
            event_type=lookup_event_type("Pause Final Mark"),
            pause_seconds=0.001,
            timestamp=1.0,
            pre_used_kb=1024,
            post_used_kb=2048,
        )


def test_event_is_immutable() -> None:
    event = GCEvent(event_type=lookup_event_type("Pause Init Mark"), pause_seconds=0.1, timestamp=1.0)
    with pytest.raises(ValidationError):
        event.pause_seconds = 0.2  # type: ignore[misc]


def test_extended_type_includes_heap_delta() -> None:
    event = ConcurrentGCEvent(
        event_type=lookup_event_type("Concurrent marking"),
        pause_seconds=0.003688,
        timestamp=0.735,
        pre_used_kb=75776,
        post_used_kb=75776,
        total_kb=131072,
    )
    assert event.is_concurrent
    assert event.extended_type == "Concurrent marking 75776K->75776K(131072K)"


def test_extended_type_without_memory_is_name() -> None:
    event = GCEvent(event_type=lookup_event_type("Pause Init Mark"), pause_seconds=0.1, timestamp=1.0)
    assert event.extended_type == "Pause Init Mark"
    assert not event.has_datestamp


def test_model_keeps_insertion_order() -> None:
    model = GCModel()
    model.set_format(LogFormat.RED_HAT_SHENANDOAH_GC)
    first = GCEvent(event_type=lookup_event_type("Pause Final Mark"), pause_seconds=0.2, timestamp=2.0)
    second = ConcurrentGCEvent(
        event_type=lookup_event_type("Concurrent marking"), pause_seconds=0.1, timestamp=1.0
    )
    model.add(first)
    model.add(second)

    assert list(model) == [first, second]
    assert model.events == (first, second)
    assert model.pause_events == [first]
    assert model.concurrent_events == [second]
    assert model.format.value == "Red Hat Shenandoah GC"


def test_event_type_carries_name_and_category_only() -> None:
    assert set(EventType.model_fields) == {"name", "category"}
