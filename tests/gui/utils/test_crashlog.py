"""Unit tests for crashlog module."""
from __future__ import annotations

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture
def app_data(tmp_path: Path):
    # Patch at the source where it's imported from
    with patch("grading_guru.gui.utils.paths.get_app_data_dir", return_value=tmp_path / "appdata"):
        yield tmp_path / "appdata"


class TestCrashlogModule:
    """Tests for crashlog utilities."""

    def test_get_crashlog_dir_creates_directory(self, app_data):
        from grading_guru.gui.utils.crashlog import get_crashlog_dir

        crash_dir = get_crashlog_dir()

        assert crash_dir.exists()
        assert crash_dir.name == "crash_logs"
        assert crash_dir.parent == app_data

    def test_rotate_crash_logs_limits_to_max(self, app_data):
        from grading_guru.gui.utils.crashlog import MAX_CRASH_LOGS, _rotate_crash_logs, get_crashlog_dir

        crash_dir = get_crashlog_dir()
        for i in range(6):
            log_file = crash_dir / f"crash_2024010{i}_120000.log"
            log_file.write_text(f"log {i}")
            os.utime(log_file, (i, i))

        _rotate_crash_logs()

        remaining = sorted(p.name for p in crash_dir.glob("crash_*.log"))
        # Room is left for the log about to be written
        assert len(remaining) == MAX_CRASH_LOGS - 1
        assert "crash_20240100_120000.log" not in remaining

    def test_format_crash_report_includes_traceback(self):
        from grading_guru.gui.utils.crashlog import format_crash_report

        try:
            raise RuntimeError("kaboom")
        except RuntimeError:
            report = format_crash_report(*sys.exc_info(), app_version="1.2.3")

        assert report.startswith("Grading Guru Crash Report")
        assert "Version: 1.2.3" in report
        assert "RuntimeError: kaboom" in report

    def test_write_crash_report_returns_path(self, app_data):
        from grading_guru.gui.utils.crashlog import write_crash_report

        path = write_crash_report("details")
        assert path is not None
        assert path.read_text(encoding="utf-8") == "details"

    def test_check_previous_crash_without_marker(self, app_data):
        from grading_guru.gui.utils.crashlog import check_previous_crash

        assert check_previous_crash() is None

    def test_check_previous_crash_with_marker_returns_log_and_clears(self, app_data):
        from grading_guru.gui.utils.crashlog import (
            _create_unclean_exit_marker,
            _last_crash_path,
            _marker_path,
            check_previous_crash,
        )

        _create_unclean_exit_marker()
        _last_crash_path().write_text("segfault in Qt", encoding="utf-8")

        assert check_previous_crash() == "segfault in Qt"
        assert not _marker_path().exists()
