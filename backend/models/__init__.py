"""Pydantic models for data validation and type checking."""

from models.report import LogRecord, Record, Report, RoutedGroup
from models.rule import Rule, TagExpression

__all__ = [
    "LogRecord",
    "Record",
    "Report",
    "RoutedGroup",
    "Rule",
    "TagExpression",
]
