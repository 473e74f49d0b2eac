"""Tests for the typer CLI."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from shenandoah_log.cli import app, format_kb, format_seconds

runner = CliRunner()


def test_analyze_sample_log(sample_log_file: Path) -> None:
    result = runner.invoke(app, ["analyze", str(sample_log_file)])

    assert result.exit_code == 0, result.output
    assert "Parsing Coverage" in result.output
    assert "Parsed events" in result.output


def test_analyze_exports_markdown(sample_log_file: Path, tmp_path: Path) -> None:
    report = tmp_path / "report.md"
    result = runner.invoke(app, ["analyze", str(sample_log_file), "--output", str(report)])

    assert result.exit_code == 0, result.output
    content = report.read_text(encoding="utf-8")
    assert content.startswith("# Shenandoah GC Log Report")
    assert "- **Log format:** Red Hat Shenandoah GC" in content
    assert "- **Candidate lines:** 9" in content
    assert "- **Parsed events:** 8" in content
    assert "- **Unparsed candidate lines:** 1" in content
    assert "| All pauses | pause | 4 |" in content
    assert "| Pause Init Mark | pause | 1 | 1.021ms |" in content
    assert "| Concurrent evacuation | concurrent | 1 | 7.912ms |" in content


def test_analyze_verbose_reports_line_count(sample_log_file: Path) -> None:
    result = runner.invoke(app, ["analyze", str(sample_log_file), "--verbose"])

    assert result.exit_code == 0, result.output
    assert "Read 16 lines" in result.output


def test_analyze_without_events_fails(tmp_path: Path) -> None:
    log_file = tmp_path / "empty.log"
    log_file.write_text("[0.007s][info][gc] Using Shenandoah\n", encoding="utf-8")

    result = runner.invoke(app, ["analyze", str(log_file)])

    assert result.exit_code == 1
    assert "No Shenandoah GC events" in result.output


def test_analyze_undecodable_file_fails(tmp_path: Path) -> None:
    log_file = tmp_path / "binary.log"
    log_file.write_bytes(b"\xff\xfe\xfa\n")

    result = runner.invoke(app, ["analyze", str(log_file)])

    assert result.exit_code == 1
    assert "cannot read" in result.output


def test_version() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "shenandoah-log 1.0.0" in result.output


def test_formatters() -> None:
    assert format_seconds(1.5) == "1.500s"
    assert format_seconds(90.0) == "90.0s (1.5m)"
    assert format_kb(512) == "512 KB"
    assert format_kb(2048) == "2.0 MB"
    assert format_kb(3 * 1024 * 1024) == "3.00 GB"
