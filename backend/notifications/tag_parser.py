"""
Tagmap parsing for the notification system.

Turns tagmap text into an ordered list of rules. Each non-blank,
non-comment line has the form::

    ops@example.com, oncall@example.com: all, !noisy
"""

import re
from typing import List

from pydantic import ValidationError

from models.rule import Rule, TagExpression
from models.types import WILDCARD_TAG
from notifications.errors import MalformedRuleError

COMMENT_MARKER = "#"
NEGATION_MARKER = "!"

_TAG_TOKEN = re.compile(r"^!?[-\w.]+$")
_RECIPIENT_SPLIT = re.compile(r"[\s,]+")


def parse_tagmap(text: str) -> List[Rule]:
    """
    Parse tagmap text into rules, preserving line order.

    Args:
        text: Full contents of the tagmap file

    Returns:
        List of rules in the order their lines appear

    Raises:
        MalformedRuleError: If any line is invalid. No partial rule set is returned.
    """
    rules = []
    for line_number, line in enumerate(text.splitlines(), 1):
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_MARKER):
            continue
        rules.append(parse_rule_line(stripped, line_number))
    return rules


def parse_rule_line(line: str, line_number: int | None = None) -> Rule:
    """Parse a single ``<recipients>: <tags>`` line."""
    recipient_text, sep, tag_text = line.partition(":")
    if not sep:
        raise MalformedRuleError("Invalid tagmap line, expected '<recipients>: <tags>'", line_number, line)

    # Trailing comments are only allowed after the tag list
    tag_text = tag_text.split(COMMENT_MARKER, 1)[0]

    recipients = tuple(r for r in _RECIPIENT_SPLIT.split(recipient_text.strip()) if r)
    if not recipients:
        raise MalformedRuleError("Invalid tagmap line, no recipients", line_number, line)

    if not tag_text.strip():
        raise MalformedRuleError("Invalid tagmap line, no tags", line_number, line)

    positive = set()
    negative = set()
    for token in (t.strip() for t in tag_text.split(",")):
        if not _TAG_TOKEN.match(token):
            raise MalformedRuleError(f"Invalid tag {token!r}", line_number, line)
        if token.startswith(NEGATION_MARKER):
            tag = token[len(NEGATION_MARKER):]
            if tag == WILDCARD_TAG:
                raise MalformedRuleError(f"Tag '{WILDCARD_TAG}' cannot be negated", line_number, line)
            negative.add(tag)
        else:
            positive.add(token)

    if not positive:
        raise MalformedRuleError("Rule has no positive tags", line_number, line)

    try:
        expression = TagExpression(positive=frozenset(positive), negative=frozenset(negative))
        return Rule(recipients=recipients, expression=expression)
    except ValidationError as e:
        raise MalformedRuleError(str(e), line_number, line) from e
