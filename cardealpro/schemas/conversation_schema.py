"""Conversation message and sales-technique schemas."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class SalesTechniqueType(str, Enum):
    WHAT_IF = "what_if"
    YES_LADDER = "yes_ladder"
    GIFT_LETTER = "gift_letter"
    GENERAL = "general"


class SalesTechnique(BaseModel):
    """A tagged technique with a short human description."""

    type: SalesTechniqueType
    description: str


class TechniqueSuggestion(BaseModel):
    """Suggested phrase plus the technique it comes from."""

    suggestion: str
    technique: SalesTechnique


class Message(BaseModel):
    """A single message in the salesperson/assistant conversation."""

    role: Role
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    field_data: Optional[dict[str, str]] = None
    sales_suggestion: Optional[str] = None
    sales_technique: Optional[SalesTechnique] = None


class NotificationLevel(str, Enum):
    INFO = "info"
    ERROR = "error"


class Notification(BaseModel):
    """One-shot user-visible event (toast)."""

    level: NotificationLevel = NotificationLevel.INFO
    title: str
    message: str
