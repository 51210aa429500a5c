"""Pydantic models for parsed tagmap rules."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.types import WILDCARD_TAG, RecipientList, TagSet


class TagExpression(BaseModel):
    """Positive/negative tag predicate of a single rule."""

    model_config = ConfigDict(frozen=True)

    positive: TagSet
    negative: TagSet = Field(default_factory=frozenset)

    @field_validator("positive")
    @classmethod
    def _positive_not_empty(cls, value: TagSet) -> TagSet:
        if not value:
            raise ValueError("a tag expression needs at least one positive tag")
        return value

    @field_validator("negative")
    @classmethod
    def _wildcard_not_negated(cls, value: TagSet) -> TagSet:
        if WILDCARD_TAG in value:
            raise ValueError(f"'{WILDCARD_TAG}' is reserved and cannot be negated")
        return value

    @property
    def matches_all(self) -> bool:
        """True when the wildcard tag is among the positive tags."""
        return WILDCARD_TAG in self.positive


class Rule(BaseModel):
    """Recipients notified about records selected by an expression."""

    model_config = ConfigDict(frozen=True)

    recipients: RecipientList = Field(..., min_length=1)
    expression: TagExpression
