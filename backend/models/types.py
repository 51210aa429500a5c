"""Shared type definitions for type checking.

Uses NewType for values that should not be mixed up (e.g., passing a tag
where a recipient address is expected).

Uses TypeAlias for complex types that are purely structural.
"""

from typing import NewType, TypeAlias

# Distinct string types for type safety
Tag = NewType("Tag", str)
EmailAddress = NewType("EmailAddress", str)
HostName = NewType("HostName", str)

# Structural aliases using TypeAlias
TagSet: TypeAlias = frozenset[str]
RecipientList: TypeAlias = tuple[str, ...]
ReportMetrics: TypeAlias = dict[str, dict[str, int | float]]

# Reserved positive tag matching every record
WILDCARD_TAG = "all"
