"""Test fixtures for the Shenandoah reader."""

from __future__ import annotations

from pathlib import Path

import pytest

SAMPLE_LOG = """\
[0.007s][info][gc] Using Shenandoah
[0.008s][info][gc,init] Regions: 2048 x 256K
[0.730s][info][gc,start     ] GC(0) Pause Init Mark
[0.731s][info][gc           ] GC(0) Pause Init Mark 1.021ms
[0.731s][info][gc,start     ] GC(0) Concurrent marking
[0.735s][info][gc           ] GC(0) Concurrent marking 74M->74M(128M) 3.688ms
[0.735s][info][gc,start     ] GC(0) Pause Final Mark
[0.736s][info][gc           ] GC(0) Pause Final Mark 74M->76M(128M) 0.811ms
[0.736s][info][gc,ergo      ] GC(0) Adaptive CSet Selection. Target Free: 18M, Actual Free: 106M
[0.744s][info][gc           ] GC(0) Concurrent evacuation 76M->90M(128M) 7.912ms
[0.745s][info][gc           ] GC(0) Pause Init Update Refs 0.017ms
[0.750s][info][gc           ] GC(0) Concurrent update references 90M->90M(128M) 4.816ms
[0.751s][info][gc           ] GC(0) Pause Final Update Refs 90M->38M(128M) 0.350ms
[0.751s][info][gc           ] GC(0) Concurrent cleanup 38M->38M(128M) 0.021ms
[0.800s][info][safepoint    ] Application time: 0.0480 seconds
[0.760s][info][gc           ] GC(1) Degenerated GC upgrading to Full GC
"""


class RecordingSink:
    """Diagnostics sink that keeps formatted messages."""

    def __init__(self) -> None:
        self.infos: list[str] = []
        self.warnings: list[str] = []

    def info(self, msg: str, *args: object) -> None:
        self.infos.append(msg % args)

    def warning(self, msg: str, *args: object) -> None:
        self.warnings.append(msg % args)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def sample_lines() -> list[str]:
    return SAMPLE_LOG.splitlines(keepends=True)


@pytest.fixture
def sample_log_file(tmp_path: Path) -> Path:
    path = tmp_path / "gc-shenandoah.log"
    path.write_text(SAMPLE_LOG, encoding="utf-8")
    return path
