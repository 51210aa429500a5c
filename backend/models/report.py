"""Pydantic models for report records and routed output."""

from datetime import datetime
from typing import Any, Iterable, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from models.types import RecipientList, TagSet


@runtime_checkable
class Record(Protocol):
    """Anything the matcher can route: a tag set plus a text rendering."""

    @property
    def tags(self) -> Iterable[str]: ...

    def to_report(self) -> str: ...


class LogRecord(BaseModel):
    """A single tagged log line from a configuration run."""

    model_config = ConfigDict(frozen=True)

    message: str
    source: str = "Puppet"
    level: str = "notice"
    time: datetime
    tags: TagSet = Field(default_factory=frozenset)

    def to_report(self) -> str:
        return f"{self.time.isoformat()} {self.source} ({self.level}): {self.message}"


class RoutedGroup(BaseModel):
    """Rendered report body for one rule's recipients."""

    model_config = ConfigDict(frozen=True)

    recipients: RecipientList = Field(..., min_length=1)
    body: str


class Report(BaseModel):
    """Upstream run report the records are taken from."""

    host: str = Field(..., min_length=1)
    time: datetime
    logs: list[LogRecord] = Field(default_factory=list)
    metrics: dict[str, Any] = Field(default_factory=dict)
