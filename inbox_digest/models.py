"""Typed containers shared across the pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    WORK = "work"
    PERSONAL = "personal"
    SPAM = "spam"
    NEWSLETTER = "newsletter"
    URGENT = "urgent"
    MEETING = "meeting"
    INVOICE = "invoice"
    SUPPORT = "support"


class Importance(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SuggestedAction(str, Enum):
    REPLY = "reply"
    FORWARD = "forward"
    ARCHIVE = "archive"
    DELETE = "delete"
    SCHEDULE_MEETING = "schedule_meeting"
    FOLLOW_UP = "follow_up"
    NO_ACTION = "no_action"


HIGH_PRIORITY = frozenset({Importance.HIGH, Importance.CRITICAL})


@dataclass(frozen=True)
class Email:
    """An unread Outlook message as returned by Graph."""

    id: str
    subject: str
    body_text: str
    sender_address: str
    is_read: bool = False
    sender_name: Optional[str] = None


class Classification(BaseModel):
    """Structured judgment for one email, validated against fixed value sets."""

    model_config = ConfigDict(
        extra="forbid", frozen=True, populate_by_name=True, str_strip_whitespace=True
    )

    category: Category
    importance: Importance
    suggested_action: SuggestedAction = Field(alias="suggestedAction")
    summary: str = Field(min_length=1)

    @property
    def is_high_priority(self) -> bool:
        return self.importance in HIGH_PRIORITY


@dataclass(frozen=True)
class ClassifiedEmail:
    """An email paired with its classification, if one could be produced."""

    email: Email
    classification: Optional[Classification]


@dataclass(frozen=True)
class Report:
    """Aggregated view of one run; built once and discarded after dispatch."""

    generated_on: date
    entries: tuple[ClassifiedEmail, ...]
    category_counts: Mapping[str, int]
    high_priority: tuple[ClassifiedEmail, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "category_counts", MappingProxyType(dict(self.category_counts)))

    @property
    def classified(self) -> tuple[ClassifiedEmail, ...]:
        return tuple(entry for entry in self.entries if entry.classification is not None)

    @property
    def total(self) -> int:
        return len(self.entries)
