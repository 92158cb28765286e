"""
Domain models for completed problems.

Records are immutable; a changed completion is modeled as a new Record
that replaces the old one in the cache.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class Record(BaseModel):
    """
    One completed problem tracked for spaced repetition.

    Attributes:
        link: URL of the problem page.
        id: Stable problem identifier (the title slug); the cache key.
        difficulty: Easy, Medium or Hard.
        repeat_date: When the problem is next due for repetition.
        last_completion_date: When the problem was last solved.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    link: str
    id: str = Field(validation_alias=AliasChoices("id", "titleSlug"))
    difficulty: Difficulty
    repeat_date: datetime
    last_completion_date: datetime

    @field_validator("repeat_date", "last_completion_date")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # Date-only and naive values are treated as UTC so records compare safely.
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys and ISO dates, as the remote table expects."""
        return self.model_dump(mode="json", by_alias=True)
