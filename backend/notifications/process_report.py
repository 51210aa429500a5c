"""
CLI script for routing a run report to tagmap recipients.

Usage:
    # Route and send a report using settings from the environment
    uv run python -m notifications.process_report /var/lib/puppet/reports/web01.json

    # Use a different tagmap
    uv run python -m notifications.process_report report.json --tagmap ./tagmail.conf

    # Dry run (match and render, don't send emails)
    uv run python -m notifications.process_report report.json --dry-run
"""

import argparse
import os
import sys
from dataclasses import dataclass, field
from typing import Any, List, Mapping

from ingest.report_loader import ReportLoadError, load_report
from models.report import Report, RoutedGroup
from notifications.email_sender import dispatch_reports
from notifications.error_logger import log_routing_error
from notifications.errors import MalformedRuleError, RenderError
from notifications.rule_matcher import route
from notifications.tag_parser import parse_tagmap
from shared.config import Settings, load_settings
from shared.utils import print_summary

SKIPPED = "skipped"
FAILED = "failed"
NO_MATCHES = "no_matches"
DISPATCHED = "dispatched"
DRY_RUN = "dry_run"


@dataclass
class ProcessOutcome:
    """Result of one routing pass."""

    status: str
    groups: List[RoutedGroup] = field(default_factory=list)
    error_file: str | None = None


def should_send_report(metrics: Mapping[str, Any]) -> bool:
    """
    Check whether a run changed anything worth reporting.

    Only a run with zero out-of-sync and zero changed resources is skipped.
    Missing or malformed metrics are treated as worth sending.
    """
    resources = metrics.get("resources") if isinstance(metrics, Mapping) else None
    if not isinstance(resources, Mapping):
        return True
    return not (resources.get("out_of_sync") == 0 and resources.get("changed") == 0)


def process_report(report: Report, settings: Settings, dry_run: bool = False) -> ProcessOutcome:
    """
    Route a report's log records to tagmap recipients and dispatch the emails.

    Args:
        report: Report to route
        settings: Tagmap location and mail transport settings
        dry_run: If True, match and render but don't send anything

    Returns:
        ProcessOutcome describing what happened
    """
    if not os.path.exists(settings.tagmap):
        print(f"Cannot send tagmail report; no tagmap file {settings.tagmap}")
        return ProcessOutcome(status=SKIPPED)

    if not should_send_report(report.metrics):
        print("Not sending tagmail report; no changes")
        return ProcessOutcome(status=SKIPPED)

    try:
        with open(settings.tagmap, encoding="utf-8") as f:
            tagmap_text = f.read()
    except UnicodeDecodeError as e:
        return _fail_pass(report, settings, "parsing", f"Tagmap {settings.tagmap} is not valid UTF-8: {e}")
    except OSError as e:
        return _fail_pass(report, settings, "reading", e)

    try:
        rules = parse_tagmap(tagmap_text)
        groups = route(rules, report.logs, notify=lambda msg: print(f"  ℹ️  {msg}"))
    except MalformedRuleError as e:
        return _fail_pass(report, settings, "parsing", e)
    except RenderError as e:
        return _fail_pass(report, settings, "rendering", e)

    if not groups:
        return ProcessOutcome(status=NO_MATCHES)

    if dry_run:
        for group in groups:
            print(f"  [DRY RUN] Would send report to {', '.join(group.recipients)}")
    else:
        dispatch_reports(groups, settings, report.host)

    print_summary(report.host, rules=len(rules), routed=len(groups), records=len(report.logs))
    return ProcessOutcome(status=DRY_RUN if dry_run else DISPATCHED, groups=groups)


def _fail_pass(
    report: Report, settings: Settings, stage: str, error: BaseException | str
) -> ProcessOutcome:
    """Log a failed routing pass; nothing is sent for it."""
    error_file = log_routing_error(
        stage,
        error,
        context={
            "host": report.host,
            "tagmap": settings.tagmap,
            "record_count": len(report.logs),
        },
        log_dir=settings.log_dir,
    )
    print(f"  ⚠️  Error routing report for {report.host}. Details logged to: {error_file}")
    return ProcessOutcome(status=FAILED, error_file=error_file)


def main(argv: List[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Route a run report to tagmap recipients and email them"
    )

    parser.add_argument("report", help="Path to the JSON run report")

    parser.add_argument(
        "--tagmap",
        type=str,
        help="Tagmap file (defaults to TAGMAIL_TAGMAP or /etc/puppet/tagmail.conf)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Dry run mode (don't actually send emails)",
    )

    args = parser.parse_args(argv)

    settings = load_settings()
    if args.tagmap:
        settings = settings.model_copy(update={"tagmap": args.tagmap})

    try:
        report = load_report(args.report)
    except ReportLoadError as e:
        print(f"✗ {e}")
        return 1

    outcome = process_report(report, settings, dry_run=args.dry_run)
    return 1 if outcome.status == FAILED else 0


if __name__ == "__main__":
    sys.exit(main())
