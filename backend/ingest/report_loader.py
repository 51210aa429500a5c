"""
Load run reports from JSON files into validated Report models.

Log timestamps are parsed leniently since report producers disagree on
date formats.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from models.report import LogRecord, Report
from shared.utils import parse_date_string


class ReportLoadError(ValueError):
    """Report file is unreadable or does not describe a valid report."""


def load_report(path: str | Path) -> Report:
    """
    Read and validate a report file.

    Args:
        path: Path to a JSON report

    Returns:
        Report with its log records

    Raises:
        ReportLoadError: If the file cannot be read, parsed or validated
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ReportLoadError(f"Could not read report {path}: {e}") from e

    if not isinstance(data, dict):
        raise ReportLoadError(f"Report {path} must be a JSON object")

    try:
        return build_report(data)
    except ValidationError as e:
        raise ReportLoadError(f"Invalid report {path}: {e}") from e


def build_report(data: Dict[str, Any]) -> Report:
    """
    Build a Report from decoded JSON, filling log defaults from the report.

    Raises:
        ReportLoadError: If logs isn't a list of JSON objects
        ValidationError: If a field has the wrong type (e.g. tags given as a string)
    """
    report_time = _parse_time(data.get("time")) or datetime.now(timezone.utc)

    entries = data.get("logs") or []
    if not isinstance(entries, list):
        raise ReportLoadError(f"Report logs must be a list, got {type(entries).__name__}")

    logs = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ReportLoadError(f"Log entry {index} must be an object, got {type(entry).__name__}")
        log_time = _parse_time(entry.get("time")) or report_time
        logs.append(
            LogRecord(
                message=entry.get("message", ""),
                source=entry.get("source") or "Puppet",
                level=entry.get("level") or "notice",
                time=log_time,
                # Not coerced here; validation rejects a bare string
                tags=entry.get("tags") or (),
            )
        )

    return Report(
        host=data.get("host", ""),
        time=report_time,
        logs=logs,
        metrics=data.get("metrics") or {},
    )


def _parse_time(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return parse_date_string(value)
    return None
