"""
Unit tests for notifications/process_report.py

Tests the no-changes gate, tagmap handling, failure reporting,
dry runs and the CLI entry point.
"""

import json
import os
import tempfile
import unittest
from unittest.mock import patch

from ingest.report_loader import build_report
from notifications.process_report import (
    DISPATCHED,
    DRY_RUN,
    FAILED,
    NO_MATCHES,
    SKIPPED,
    main,
    process_report,
    should_send_report,
)
from shared.config import Settings
from tests.fixtures.record_factory import create_test_report_data


class TestShouldSendReport(unittest.TestCase):
    """Tests for should_send_report() gate."""

    def test_no_changes_skipped(self):
        """Zero out-of-sync and zero changed resources means skip."""
        self.assertFalse(should_send_report({"resources": {"out_of_sync": 0, "changed": 0}}))

    def test_changes_sent(self):
        """Any change is worth sending."""
        self.assertTrue(should_send_report({"resources": {"out_of_sync": 0, "changed": 2}}))
        self.assertTrue(should_send_report({"resources": {"out_of_sync": 1, "changed": 0}}))

    def test_missing_metrics_sent(self):
        """Missing or malformed metrics don't suppress the report."""
        self.assertTrue(should_send_report({}))
        self.assertTrue(should_send_report({"resources": "n/a"}))
        self.assertTrue(should_send_report({"resources": {"changed": 0}}))


@patch("builtins.print")
class TestProcessReport(unittest.TestCase):
    """Tests for process_report()."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.tagmap = os.path.join(self.tmp.name, "tagmail.conf")
        self.settings = Settings(
            tagmap=self.tagmap,
            smtp_server="mail.example.com",
            log_dir=os.path.join(self.tmp.name, "logs"),
        )

    def _write_tagmap(self, text: str) -> None:
        with open(self.tagmap, "w", encoding="utf-8") as f:
            f.write(text)

    def test_missing_tagmap_skips(self, mock_print):
        """No tagmap file: nothing happens."""
        outcome = process_report(build_report(create_test_report_data()), self.settings)

        self.assertEqual(outcome.status, SKIPPED)
        mock_print.assert_called_once()
        self.assertIn("no tagmap file", mock_print.call_args.args[0])

    def test_no_changes_skips(self, mock_print):
        """Unchanged run isn't routed."""
        self._write_tagmap("ops@x: all\n")
        report = build_report(create_test_report_data(out_of_sync=0, changed=0))

        outcome = process_report(report, self.settings)

        self.assertEqual(outcome.status, SKIPPED)
        mock_print.assert_called_once_with("Not sending tagmail report; no changes")

    @patch("notifications.process_report.dispatch_reports")
    def test_dispatches_routed_groups(self, mock_dispatch, mock_print):
        """Matched groups are dispatched with settings and host."""
        self._write_tagmap("ops@x: nginx\nnobody@x: mysql\n")
        report = build_report(create_test_report_data())

        outcome = process_report(report, self.settings)

        self.assertEqual(outcome.status, DISPATCHED)
        self.assertEqual(len(outcome.groups), 1)
        mock_dispatch.assert_called_once_with(outcome.groups, self.settings, "web01.example.com")
        printed = [str(c.args[0]) for c in mock_print.call_args_list if c.args]
        self.assertTrue(any("No messages to report to nobody@x" in p for p in printed))

    @patch("notifications.process_report.dispatch_reports")
    def test_dry_run_does_not_dispatch(self, mock_dispatch, mock_print):
        """Dry run renders but sends nothing."""
        self._write_tagmap("ops@x: all\n")

        outcome = process_report(build_report(create_test_report_data()), self.settings, dry_run=True)

        self.assertEqual(outcome.status, DRY_RUN)
        self.assertEqual(len(outcome.groups), 1)
        mock_dispatch.assert_not_called()

    @patch("notifications.process_report.dispatch_reports")
    def test_no_matches(self, mock_dispatch, mock_print):
        """No rule matched: nothing dispatched."""
        self._write_tagmap("ops@x: mysql\n")

        outcome = process_report(build_report(create_test_report_data()), self.settings)

        self.assertEqual(outcome.status, NO_MATCHES)
        mock_dispatch.assert_not_called()

    @patch("notifications.process_report.dispatch_reports")
    def test_malformed_tagmap_fails_pass(self, mock_dispatch, mock_print):
        """Bad tagmap line fails the pass, logs the error, sends nothing."""
        self._write_tagmap("ops@x: all\nbadline\n")

        outcome = process_report(build_report(create_test_report_data()), self.settings)

        self.assertEqual(outcome.status, FAILED)
        self.assertEqual(outcome.groups, [])
        self.assertTrue(os.path.exists(outcome.error_file))
        with open(outcome.error_file, encoding="utf-8") as f:
            self.assertIn("Stage: parsing", f.read())
        mock_dispatch.assert_not_called()


    @patch("notifications.process_report.dispatch_reports")
    def test_non_utf8_tagmap_fails_pass(self, mock_dispatch, mock_print):
        """Undecodable tagmap bytes fail the pass instead of escaping."""
        with open(self.tagmap, "wb") as f:
            f.write(b"ops@x: all\n\xff\xfe\n")

        outcome = process_report(build_report(create_test_report_data()), self.settings)

        self.assertEqual(outcome.status, FAILED)
        with open(outcome.error_file, encoding="utf-8") as f:
            content = f.read()
        self.assertIn("Stage: parsing", content)
        self.assertIn("not valid UTF-8", content)
        mock_dispatch.assert_not_called()

    @patch("notifications.process_report.dispatch_reports")
    def test_unreadable_tagmap_fails_pass(self, mock_dispatch, mock_print):
        """A tagmap path that can't be read is logged as a reading failure."""
        os.mkdir(self.tagmap)

        outcome = process_report(build_report(create_test_report_data()), self.settings)

        self.assertEqual(outcome.status, FAILED)
        with open(outcome.error_file, encoding="utf-8") as f:
            self.assertIn("Stage: reading", f.read())
        mock_dispatch.assert_not_called()
    @patch("notifications.process_report.dispatch_reports")
    @patch("notifications.process_report.route")
    def test_render_failure_fails_pass(self, mock_route, mock_dispatch, mock_print):
        """Rendering errors fail the pass with a rendering error log."""
        from notifications.errors import RenderError

        self._write_tagmap("ops@x: all\n")
        mock_route.side_effect = RenderError("cannot render")

        outcome = process_report(build_report(create_test_report_data()), self.settings)

        self.assertEqual(outcome.status, FAILED)
        with open(outcome.error_file, encoding="utf-8") as f:
            self.assertIn("Stage: rendering", f.read())
        mock_dispatch.assert_not_called()


@patch("builtins.print")
class TestMain(unittest.TestCase):
    """Tests for the CLI entry point."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.report_path = os.path.join(self.tmp.name, "report.json")
        self.tagmap = os.path.join(self.tmp.name, "tagmail.conf")
        with open(self.report_path, "w", encoding="utf-8") as f:
            json.dump(create_test_report_data(), f)
        with open(self.tagmap, "w", encoding="utf-8") as f:
            f.write("ops@x: all\n")

    @patch("notifications.process_report.dispatch_reports")
    def test_tagmap_override_and_dry_run(self, mock_dispatch, mock_print):
        """--tagmap replaces the configured path and --dry-run skips sending."""
        with patch("notifications.process_report.load_settings", return_value=Settings()):
            status = main([self.report_path, "--tagmap", self.tagmap, "--dry-run"])

        self.assertEqual(status, 0)
        mock_dispatch.assert_not_called()

    def test_unreadable_report_exits_nonzero(self, mock_print):
        """Missing report file exits with status 1."""
        with patch("notifications.process_report.load_settings", return_value=Settings()):
            status = main([os.path.join(self.tmp.name, "missing.json")])

        self.assertEqual(status, 1)

    def test_failed_pass_exits_nonzero(self, mock_print):
        """Malformed tagmap exits with status 1."""
        with open(self.tagmap, "w", encoding="utf-8") as f:
            f.write("badline\n")
        settings = Settings(log_dir=os.path.join(self.tmp.name, "logs"))

        with patch("notifications.process_report.load_settings", return_value=settings):
            status = main([self.report_path, "--tagmap", self.tagmap])

        self.assertEqual(status, 1)

    def test_malformed_log_entries_exit_nonzero(self, mock_print):
        """A report with non-object log entries exits with status 1."""
        with open(self.report_path, "w", encoding="utf-8") as f:
            json.dump(create_test_report_data(logs=["just a string"]), f)

        with patch("notifications.process_report.load_settings", return_value=Settings()):
            status = main([self.report_path, "--tagmap", self.tagmap])

        self.assertEqual(status, 1)


if __name__ == "__main__":
    unittest.main()
