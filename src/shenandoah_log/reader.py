"""Reader for Shenandoah GC logs written with unified logging (-Xlog:gc).

Handles the default decorations, e.g.::

    [0.730s][info][gc,start     ] GC(0) Pause Init Mark
    [0.731s][info][gc           ] GC(0) Pause Init Mark 1.021ms
    [0.735s][info][gc           ] GC(0) Concurrent marking 74M->74M(128M) 3.688ms
    [43.948s][info][gc          ] GC(831) Pause Full (Allocation Failure) 7943M->6013M(8192M) 14289.335ms

Lines either carry no heap descriptor (pauses such as Init Mark) or carry
one between the event name and the duration. Everything else is filtered
out or reported as unparseable.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Literal, Protocol, TypeAlias

from pydantic import BaseModel, ConfigDict

from shenandoah_log.config import EXCLUDE_STRINGS, ReaderSettings
from shenandoah_log.errors import InvalidTimeOriginError, MalformedHeapDescriptorError
from shenandoah_log.model import (
    ConcurrentGCEvent,
    GCEvent,
    GCModel,
    KilobytesValue,
    LogFormat,
    SecondsValue,
    lookup_event_type,
)

logger = logging.getLogger(__name__)

# ============================================================
# PATTERNS
# ============================================================

# [0.693s][info][gc           ] GC(0) Pause Init Mark 1.070ms
#   -> time origin, event name, duration
PATTERN_WITHOUT_HEAP: re.Pattern[str] = re.compile(
    r"^\[([^s\]]*)[^\-]*?\)[ ]([^\-]*)[ ]([0-9]+[.,][0-9]+)"
)

# [13.522s][info][gc            ] GC(708) Concurrent evacuation  4848M->4855M(4998M) 2.872ms
#   -> time origin, event name, heap descriptor, duration
PATTERN_WITH_HEAP: re.Pattern[str] = re.compile(
    r"^\[([^s\]]*).*?\)[ ](.*)[ ]"
    r"([0-9]+[BKMG]\-\>[0-9]+[BKMG]\([0-9]+[BKMG]\)) ([0-9]+[.,][0-9]+)"
)

# 4848M->4855M(4998M)
PATTERN_HEAP_CHANGES: re.Pattern[str] = re.compile(
    r"(?P<before>[0-9]+)(?P<before_unit>[BKMG])->"
    r"(?P<after>[0-9]+)(?P<after_unit>[BKMG])\("
    r"(?P<total>[0-9]+)(?P<total_unit>[BKMG])\)"
)

# 2017-08-30T23:22:47.357+0300
PATTERN_ISO8601_DATE: re.Pattern[str] = re.compile(
    r"^\d{4}\-\d\d\-\d\d[tT][\d:\.]*?(?:[zZ]|[+\-]\d\d:?\d\d)?$"
)

# ============================================================
# MATCH RESULTS
# ============================================================


class NoHeapMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["no_heap"] = "no_heap"
    time_origin: str
    event_name: str
    duration: str


class WithHeapMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["with_heap"] = "with_heap"
    time_origin: str
    event_name: str
    heap_descriptor: str
    duration: str


class NoMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["no_match"] = "no_match"


LineMatch: TypeAlias = NoHeapMatch | WithHeapMatch | NoMatch


class HeapDelta(BaseModel):
    """Heap occupancy before and after a phase, plus capacity, in KB."""

    model_config = ConfigDict(frozen=True)

    before_kb: KilobytesValue
    after_kb: KilobytesValue
    total_kb: KilobytesValue


class TimeOrigin(BaseModel):
    """Either an elapsed timestamp or an absolute datestamp, never both."""

    model_config = ConfigDict(frozen=True)

    timestamp: SecondsValue | None = None
    datestamp: datetime | None = None


class DiagnosticsSink(Protocol):
    """Anything with logging.Logger-style info/warning methods."""

    def info(self, msg: str, *args: object) -> None: ...

    def warning(self, msg: str, *args: object) -> None: ...


# ============================================================
# LINE FILTER & CLASSIFIER
# ============================================================


def line_not_in_excluded_strings(
    line: str, exclude_strings: Iterable[str] = EXCLUDE_STRINGS
) -> bool:
    """Return True if the line is a parse candidate."""
    return not any(excluded in line for excluded in exclude_strings)


def classify_line(line: str) -> LineMatch:
    """Match a line against the no-heap shape first, then the with-heap shape."""
    if match := PATTERN_WITHOUT_HEAP.search(line):
        return NoHeapMatch(
            time_origin=match.group(1),
            event_name=match.group(2).strip(),
            duration=match.group(3),
        )
    if match := PATTERN_WITH_HEAP.search(line):
        return WithHeapMatch(
            time_origin=match.group(1),
            event_name=match.group(2).strip(),
            heap_descriptor=match.group(3),
            duration=match.group(4),
        )
    return NoMatch()


def is_concurrent_phase(line: str, event_name: str) -> bool:
    return "Concurrent" in line or "Concurrent" in event_name


# ============================================================
# VALUE PARSING
# ============================================================


def memory_in_kb(value: float, unit: str) -> int:
    """Convert a value with a B/K/M/G unit to KB."""
    if unit == "B":
        return round(value / 1024)
    if unit == "K":
        return round(value)
    if unit == "M":
        return round(value * 1024)
    if unit == "G":
        return round(value * 1024 * 1024)
    raise ValueError(f"Unsupported memory unit: {unit}")


def parse_heap_changes(descriptor: str) -> HeapDelta:
    """Parse 100M->80M(120M) into KB values for before, after and total."""
    match = PATTERN_HEAP_CHANGES.search(descriptor)
    if not match:
        raise MalformedHeapDescriptorError(f"Malformed heap descriptor: {descriptor}")
    return HeapDelta(
        before_kb=memory_in_kb(int(match.group("before")), match.group("before_unit")),
        after_kb=memory_in_kb(int(match.group("after")), match.group("after_unit")),
        total_kb=memory_in_kb(int(match.group("total")), match.group("total_unit")),
    )


def _parse_decimal(text: str) -> float:
    # some locales write 1,070 instead of 1.070
    return float(text.replace(",", "."))


def parse_pause_seconds(duration: str) -> SecondsValue:
    """Convert a millisecond duration such as '1,070' to seconds."""
    return _parse_decimal(duration) / 1000


def parse_date_or_timestamp(text: str, date_format: str) -> TimeOrigin:
    """Classify a time origin as an absolute date or elapsed seconds."""
    if PATTERN_ISO8601_DATE.search(text):
        try:
            return TimeOrigin(datestamp=datetime.strptime(text, date_format))
        except ValueError as e:
            raise InvalidTimeOriginError(f"Unparseable date '{text}': {e}") from e
    try:
        return TimeOrigin(timestamp=_parse_decimal(text))
    except ValueError as e:
        raise InvalidTimeOriginError(f"Unparseable timestamp '{text}'") from e


# ============================================================
# EVENT BUILDING
# ============================================================


def build_event(
    event_name: str,
    pause_seconds: SecondsValue,
    time_origin: TimeOrigin,
    *,
    concurrent: bool = False,
    heap: HeapDelta | None = None,
    line_number: int | None = None,
) -> GCEvent:
    """Assemble a pausing or concurrent event from parsed fields."""
    event_class = ConcurrentGCEvent if concurrent else GCEvent
    memory: dict[str, int] = {}
    if heap is not None:
        memory = {
            "pre_used_kb": heap.before_kb,
            "post_used_kb": heap.after_kb,
            "total_kb": heap.total_kb,
        }
    return event_class(
        event_type=lookup_event_type(event_name),
        pause_seconds=pause_seconds,
        timestamp=time_origin.timestamp,
        datestamp=time_origin.datestamp,
        line_number=line_number,
        **memory,
    )


# ============================================================
# READER
# ============================================================


class ShenandoahDataReader:
    """Turns a stream of Shenandoah log lines into a GCModel."""

    log_format: LogFormat = LogFormat.RED_HAT_SHENANDOAH_GC

    def __init__(
        self,
        settings: ReaderSettings | None = None,
        diagnostics: DiagnosticsSink | None = None,
    ) -> None:
        self.settings = settings or ReaderSettings()
        self.diagnostics: DiagnosticsSink = diagnostics or logger
        # Counts from the most recent read()
        self.total_lines = 0
        self.candidate_lines = 0

    def read(self, lines: Iterable[str]) -> GCModel:
        """Read all lines in order. Errors raised by the stream propagate."""
        self.diagnostics.info("Reading Shenandoah format...")
        self.total_lines = 0
        self.candidate_lines = 0
        try:
            model = GCModel()
            model.set_format(self.log_format)

            for line_number, raw_line in enumerate(lines, start=1):
                self.total_lines = line_number
                line = raw_line.rstrip("\r\n")
                if not line_not_in_excluded_strings(line, self.settings.exclude_strings):
                    continue
                self.candidate_lines += 1
                event = self.parse_event(line, line_number)
                if event is not None:
                    model.add(event)

            return model
        finally:
            self.diagnostics.info("Reading done.")

    def parse_event(self, line: str, line_number: int) -> GCEvent | None:
        """Parse one candidate line; returns None if it is not an event."""
        match = classify_line(line)
        if isinstance(match, NoMatch):
            self._warn_unparseable(line, line_number)
            return None

        try:
            time_origin = parse_date_or_timestamp(match.time_origin, self.settings.date_format)
        except InvalidTimeOriginError:
            self._warn_unparseable(line, line_number)
            return None
        pause_seconds = parse_pause_seconds(match.duration)

        if isinstance(match, NoHeapMatch):
            return build_event(
                match.event_name, pause_seconds, time_origin, line_number=line_number
            )

        heap: HeapDelta | None = None
        try:
            heap = parse_heap_changes(match.heap_descriptor)
        except MalformedHeapDescriptorError:
            self.diagnostics.warning(
                "Failed to find heap details from line: %s", match.heap_descriptor
            )
        return build_event(
            match.event_name,
            pause_seconds,
            time_origin,
            concurrent=is_concurrent_phase(line, match.event_name),
            heap=heap,
            line_number=line_number,
        )

    def _warn_unparseable(self, line: str, line_number: int) -> None:
        self.diagnostics.warning(
            "Failed to parse line number %d in the log file: %s", line_number, line
        )


def read_file(
    path: Path,
    settings: ReaderSettings | None = None,
    diagnostics: DiagnosticsSink | None = None,
) -> GCModel:
    """Open, read and close a Shenandoah log file."""
    reader = ShenandoahDataReader(settings, diagnostics)
    with path.open(encoding=reader.settings.encoding) as f:
        return reader.read(f)
