"""Reader configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

# Lines carrying any of these markers hold no event data.
EXCLUDE_STRINGS: tuple[str, ...] = (
    "Using Shenandoah",
    "Cancelling concurrent GC",
    "[gc,start",
    "[gc,ergo",
    "[gc,stringtable",
    "[gc,init",
    "[gc,heap",
    "[pagesize",
    "[class",
    "[os",
    "[startuptime",
    "[os,thread",
    "[gc,heap,exit",
    "Cancelling concurrent GC: Allocation Failure",
    "Phase ",
    "[gc,stats",
    "[biasedlocking",
    "[logging",
    "[verification",
    "[modules,startuptime",
    "[safepoint",
    "[stacktrace",
    "[exceptions",
    "thrown",
    "at bci",
    "for thread",
    "[module,load",
    "[module,startuptime",
)

# e.g. 2017-08-30T23:22:47.357+0300
DEFAULT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"


class ReaderSettings(BaseModel):
    """Configurable knobs for reading a Shenandoah log."""

    model_config = ConfigDict(frozen=True)

    encoding: str = "utf-8"
    date_format: str = DEFAULT_DATE_FORMAT
    exclude_strings: tuple[str, ...] = EXCLUDE_STRINGS
