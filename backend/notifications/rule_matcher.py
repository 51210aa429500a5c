"""
Rule matching logic for the notification system.

Evaluates tagmap rules against the records of a run and builds one
routed report per rule that selected at least one record.
"""

from typing import Callable, Iterable, List, Sequence

from models.report import Record, RoutedGroup
from models.rule import Rule, TagExpression
from models.types import WILDCARD_TAG
from notifications.report_renderer import render_report


def route(
    rules: Sequence[Rule],
    records: Iterable[Record],
    notify: Callable[[str], None] = print,
) -> List[RoutedGroup]:
    """
    Route records to the recipients of every matching rule.

    Rules are evaluated independently and in order. A record selected by
    several rules appears in each of their reports. Records keep the order
    of the input collection within a report.

    Args:
        rules: Parsed tagmap rules
        records: Tagged records from the run (read only)
        notify: Receives a message for every rule that matched nothing

    Returns:
        Routed groups in rule order, only for rules with at least one match

    Raises:
        RenderError: If a matched record fails to render
    """
    records = list(records)
    tag_sets = [_record_tags(record) for record in records]

    groups = []
    for rule in rules:
        matched = [
            record
            for record, tags in zip(records, tag_sets)
            if _expression_matches(rule.expression, tags)
        ]

        if not matched:
            notify(f"No messages to report to {', '.join(rule.recipients)}")
            continue

        groups.append(RoutedGroup(recipients=rule.recipients, body=render_report(matched)))

    return groups


def _expression_matches(expression: TagExpression, tags: frozenset[str]) -> bool:
    """
    Check if a record's tags satisfy an expression.

    Negative tags win over positive ones, including the wildcard.
    """
    if not expression.matches_all and expression.positive.isdisjoint(tags):
        return False
    return expression.negative.isdisjoint(tags)


def _record_tags(record: Record) -> frozenset[str]:
    # The wildcard is a keyword, never a literal record tag
    return frozenset(record.tags) - {WILDCARD_TAG}
