"""Parse errors raised by the Shenandoah reader helpers."""

from dataclasses import dataclass


@dataclass(eq=False)
class ShenandoahLogError(ValueError):
    """Base class for recoverable parse errors."""

    message: str

    def __str__(self) -> str:
        return self.message


class MalformedHeapDescriptorError(ShenandoahLogError):
    """Raised when a heap descriptor is not of the form 100M->80M(120M)."""


class InvalidTimeOriginError(ShenandoahLogError):
    """Raised when a time origin is neither a parseable date nor a number."""
