"""
Core Data Models for Info Cards

These models define the schemas for the data flowing through tagging:
1. Draft - what the user typed, input to tagging only
2. TagResult - the output of one tagging attempt, with provenance
3. Item - the persisted info card

DESIGN DECISION: Draft fields are strictly typed strings. A number or null
where a string is expected is an invalid body, not something to coerce.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS
# =============================================================================

class ItemType(str, Enum):
    """
    Known card types.

    The type is metadata for display and filtering. It NEVER influences
    which tags are chosen.
    """
    ACCOUNT = "account"
    TODO = "todo"
    SUBSCRIPTION = "subscription"
    MEMO = "memo"


# =============================================================================
# TAGGING INPUT / OUTPUT
# =============================================================================

class Draft(BaseModel):
    """
    Unsaved card fields submitted for tag inference.

    `type` is usually one of ItemType but any string is accepted.
    """
    model_config = ConfigDict(strict=True, extra="ignore")

    title: str
    type: str
    url: Optional[str] = None
    username: Optional[str] = None
    note: Optional[str] = None

    @property
    def content_length(self) -> int:
        """Trimmed title length plus trimmed note length."""
        return len(self.title.strip()) + len((self.note or "").strip())


class TagResult(BaseModel):
    """
    Result of a tagging attempt.

    Built fresh per call and never mutated afterwards (frozen).
    `fallback` is True when the tags did not come from a model response
    with at least one model-supplied tag.
    """
    model_config = ConfigDict(frozen=True)

    tags: list[str] = Field(
        default_factory=list,
        max_length=12,
        description="Ordered, de-duplicated tags (discovery order)"
    )
    summary: str = Field(
        default="",
        description="Short summary of the card"
    )
    confidence: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Confidence in the tags (0-1)"
    )
    model: str = Field(
        ...,
        description="Model id, 'rest:<id>' or 'heuristic:<reason>'"
    )
    fallback: bool = Field(
        default=False,
        description="Tags came from the heuristic engine"
    )
    error: Optional[str] = Field(
        default=None,
        description="Why the heuristic was used, if it was"
    )
    raw: Optional[Any] = Field(
        default=None,
        description="Raw model text (trace mode only)"
    )

    @field_validator('tags')
    @classmethod
    def dedupe_tags(cls, v: list[str]) -> list[str]:
        """Drop duplicates keeping the first occurrence."""
        return list(dict.fromkeys(v))

    @property
    def is_heuristic(self) -> bool:
        """True when no model call produced this result."""
        return self.model.startswith("heuristic:")

    def to_response(self) -> dict[str, Any]:
        """Wire form: `error` and `raw` only when present."""
        return self.model_dump(exclude_none=True)


# =============================================================================
# PERSISTED CARD
# =============================================================================

class Item(BaseModel):
    """
    A persisted info card.

    The tagging core only computes `tags`, `ai_summary`, `ai_confidence`
    and `ai_model`. Everything else comes from the user.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    # Identity
    id: UUID = Field(
        default_factory=uuid4,
        description="Unique card ID"
    )

    # Timestamps
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the card was created"
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    # User fields
    title: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Card title"
    )
    type: str = Field(
        default=ItemType.MEMO.value,
        description="Card type (account, todo, subscription, memo)"
    )
    url: Optional[str] = None
    username: Optional[str] = None
    note: Optional[str] = Field(
        default=None,
        max_length=8000,
    )

    # Tagging output
    tags: list[str] = Field(
        default_factory=list,
        max_length=12,
    )
    ai_summary: Optional[str] = None
    ai_confidence: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
    )
    ai_model: Optional[str] = None

    @classmethod
    def from_draft(cls, draft: Draft, result: TagResult) -> "Item":
        """Build a new card from a draft and an accepted tag result."""
        return cls(
            title=draft.title,
            type=draft.type,
            url=draft.url or None,
            username=draft.username or None,
            note=draft.note or None,
            tags=list(result.tags),
            ai_summary=result.summary,
            ai_confidence=result.confidence,
            ai_model=result.model,
        )

    def apply_draft(self, draft: Draft) -> "Item":
        """Return a copy carrying the draft's user fields."""
        return self.model_copy(update={
            "title": draft.title.strip(),
            "type": draft.type,
            "url": draft.url or None,
            "username": draft.username or None,
            "note": draft.note or None,
            "updated_at": datetime.utcnow(),
        })

    def apply_tag_result(self, result: TagResult) -> "Item":
        """Return a copy with the tag-bearing fields taken from `result`."""
        return self.model_copy(update={
            "tags": list(result.tags),
            "ai_summary": result.summary,
            "ai_confidence": result.confidence,
            "ai_model": result.model,
            "updated_at": datetime.utcnow(),
        })
