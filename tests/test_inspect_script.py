"""
Tests for the inspect_purchaser_info script.
"""

import io
import json
import sys

import pytest
import structlog
from structlog.testing import LogCapture

from scripts import inspect_purchaser_info
from tests.factories import entry, record


@pytest.fixture(autouse=True)
def logs(monkeypatch):
    """Capture structlog events (with bound context) instead of printing them."""
    monkeypatch.setattr(inspect_purchaser_info, "setup_logging", lambda stream=None: None)
    capture = LogCapture()
    structlog.configure(processors=[structlog.contextvars.merge_contextvars, capture])
    yield capture
    structlog.reset_defaults()


@pytest.fixture
def record_file(tmp_path, raw_record):
    path = tmp_path / "record.json"
    path.write_text(json.dumps(raw_record), encoding="utf-8")
    return path


class TestInspectScript:
    """Tests for main()."""

    def test_json_summary(self, record_file, capsys):
        """--json prints a machine-readable summary."""
        exit_code = inspect_purchaser_info.main(
            [str(record_file), "--at", "2024-01-15T00:00:00Z", "--json"]
        )
        assert exit_code == 0

        summary = json.loads(capsys.readouterr().out)
        assert summary["active_entitlements"] == ["forever", "pro_cat"]
        assert summary["active_subscriptions"] == ["grandfathered", "monthly_cats"]
        assert summary["non_consumable_purchases"] == ["lifetime_cats"]
        assert summary["latest_expiration_date"] == "2024-02-01T00:00:00+00:00"
        assert summary["original_application_version"] == "1.0"

    def test_text_summary(self, record_file, capsys):
        """Default output is one line per field."""
        exit_code = inspect_purchaser_info.main([str(record_file), "--at", "2024-03-01T00:00:00Z"])
        assert exit_code == 0

        out = capsys.readouterr().out
        assert "active_entitlements: forever" in out
        assert "active_subscriptions: grandfathered" in out

    def test_stdin(self, monkeypatch, capsys):
        """'-' reads the record from stdin."""
        raw = record(entitlements={"pro": entry("2024-01-01T00:00:00Z", "2024-02-01T00:00:00Z")})
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(raw)))

        exit_code = inspect_purchaser_info.main(["-", "--at", "2024-01-15T00:00:00Z", "--json"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out)["active_entitlements"] == ["pro"]

    def test_logs_go_to_stderr(self, record_file, monkeypatch):
        """Logging is configured on stderr so stdout carries only the summary."""
        streams = []
        monkeypatch.setattr(
            inspect_purchaser_info, "setup_logging", lambda stream=None: streams.append(stream)
        )

        inspect_purchaser_info.main([str(record_file), "--json"])

        assert streams == [sys.stderr]

    def test_json_output_stays_valid_with_warnings(self, tmp_path, capsys, logs):
        """Field-level warnings do not end up in the JSON summary."""
        path = tmp_path / "record.json"
        raw = record(entitlements={"pro": entry("2024-01-01T00:00:00Z", "garbage")})
        path.write_text(json.dumps(raw), encoding="utf-8")

        exit_code = inspect_purchaser_info.main(
            [str(path), "--at", "2024-01-15T00:00:00Z", "--json"]
        )

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out)["active_entitlements"] == []
        warning = next(log for log in logs.entries if log["event"] == "malformed_date_field")
        assert warning["record_path"] == str(path)

    def test_malformed_record_exit_code(self, tmp_path, logs):
        """A rejected record exits with 1."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"subscriber": []}), encoding="utf-8")
        assert inspect_purchaser_info.main([str(path)]) == 1
        assert logs.entries[-1]["event"] == "record_rejected"

    def test_corrupt_json_exit_code(self, tmp_path, logs):
        """A file that is not JSON exits with 1 instead of raising."""
        path = tmp_path / "corrupt.json"
        path.write_text("{not json", encoding="utf-8")

        assert inspect_purchaser_info.main([str(path)]) == 1
        assert logs.entries[-1]["event"] == "record_unreadable"
        assert logs.entries[-1]["record_path"] == str(path)

    def test_missing_file_exit_code(self, tmp_path, logs):
        """A missing path exits with 1 instead of raising."""
        assert inspect_purchaser_info.main([str(tmp_path / "absent.json")]) == 1
        assert logs.entries[-1]["event"] == "record_unreadable"

    def test_invalid_instant_exit_code(self, record_file):
        """An unparsable --at exits with 2."""
        assert inspect_purchaser_info.main([str(record_file), "--at", "someday"]) == 2
