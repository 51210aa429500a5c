from datetime import datetime
from dateutil import parser as date_parser


def parse_date_string(date_str: str) -> datetime | None:
    """Parse various date formats into a datetime."""
    if not date_str:
        return None
    try:
        return date_parser.parse(date_str, fuzzy=True)
    except (ValueError, OverflowError, TypeError):
        return None


def print_summary(host: str, rules: int, routed: int, records: int) -> None:
    """Print routing summary."""
    print(f"\n{'=' * 60}")
    print(f"[{datetime.now()}] Tagmail Routing Complete for {host}")
    print(f"{'=' * 60}")
    print(f"Rules:           {rules}")
    print(f"✓ Routed reports: {routed}")
    print(f"⊘ Unmatched:      {rules - routed}")
    print(f"Records:         {records}")
    print(f"{'=' * 60}\n")
