"""Renders matched records into a single report body."""

from typing import Iterable

from models.report import Record
from notifications.errors import RenderError

RECORD_SEPARATOR = "\n"


def render_report(records: Iterable[Record]) -> str:
    """
    Join each record's report text, one record per line.

    Records are rendered in the order given. No filtering or truncation
    is done here.

    Raises:
        RenderError: If any record fails to render. Nothing is returned in that case.
    """
    lines = []
    for record in records:
        try:
            lines.append(record.to_report())
        except Exception as e:
            raise RenderError(f"Could not render record {record!r}: {e}") from e
    return RECORD_SEPARATOR.join(lines)
