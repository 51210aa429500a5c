"""Error reports for failed routing passes and deliveries."""

import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping

DEFAULT_LOG_DIR = Path(__file__).parent / "logs"


def log_routing_error(
    stage: str,
    error: BaseException | str,
    context: Mapping[str, Any] | None = None,
    log_dir: str | Path | None = None,
) -> str:
    """
    Write a tagmail error report and return its path.

    Args:
        stage: Where the pass failed ('reading', 'parsing', 'rendering', 'sending')
        error: The exception, or a plain message when there is none
        context: Host, tagmap, recipients and similar details
        log_dir: Target directory, created if missing

    Returns:
        Path to the written report
    """
    directory = Path(log_dir) if log_dir else DEFAULT_LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)

    now = datetime.now()
    path = directory / f"tagmail_error_{now:%Y%m%d_%H%M%S_%f}.txt"

    lines = [
        f"Tagmail Error Report - {now.isoformat(timespec='seconds')}",
        "=" * 60,
        f"Stage: {stage}",
        f"Error: {error}",
    ]
    for key, value in (context or {}).items():
        if isinstance(value, (list, tuple)):
            value = ", ".join(map(str, value)) or "-"
        lines.append(f"{key}: {value}")

    if isinstance(error, BaseException) and error.__traceback__ is not None:
        lines += ["", "Traceback:", "-" * 60]
        lines.append("".join(traceback.format_exception(error)).rstrip())

    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)
