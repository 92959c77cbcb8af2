"""
Audit Models for Info Cards

Every tagging attempt, gate decision and card write is logged.
This makes it possible to tell afterwards whether a card's tags came from
a model or from the heuristic, and why a save was refused.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Tagging
    TAGGING_REQUESTED = "tagging_requested"
    TAGGING_COMPLETED = "tagging_completed"
    TAGGING_FELL_BACK = "tagging_fell_back"
    INPUT_REJECTED = "input_rejected"

    # Tag gate
    TAG_RESULT_ACCEPTED = "tag_result_accepted"
    TAG_RESULT_REJECTED = "tag_result_rejected"

    # Persistence
    ITEM_SAVED = "item_saved"
    ITEM_UPDATED = "item_updated"
    ITEM_DELETED = "item_deleted"
    SAVE_FAILED = "save_failed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'item', 'draft')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one add-card flow)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            str(self.entity_id) if self.entity_id else "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, ensure_ascii=False) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.tagging_completed(model, tags, fallback, correlation_id)
        event = AuditEventBuilder.item_saved(item_id, title, model, correlation_id)
    """

    @staticmethod
    def tagging_requested(
        title: str,
        item_type: str,
        forced: bool,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TAGGING_REQUESTED,
            entity_type="draft",
            correlation_id=correlation_id,
            description=f"Tagging requested: {title[:80]}",
            details={
                "type": item_type,
                "force_heuristic": forced,
            },
            is_user_action=True,
        )

    @staticmethod
    def input_rejected(
        reason: str,
        message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="draft",
            correlation_id=correlation_id,
            description=f"Draft rejected before tagging: {reason}",
            error_code=reason,
            error_message=message,
        )

    @staticmethod
    def tagging_completed(
        model: str,
        tags: list[str],
        fallback: bool,
        correlation_id: UUID,
        error: Optional[str] = None,
    ) -> AuditEvent:
        if fallback:
            return AuditEvent(
                event_type=AuditEventType.TAGGING_FELL_BACK,
                severity=AuditSeverity.WARNING,
                entity_type="draft",
                correlation_id=correlation_id,
                description=f"Tagging fell back to heuristic ({model})",
                details={
                    "model": model,
                    "tags": tags,
                },
                error_message=error,
            )
        return AuditEvent(
            event_type=AuditEventType.TAGGING_COMPLETED,
            entity_type="draft",
            correlation_id=correlation_id,
            description=f"Tagging completed by {model} with {len(tags)} tags",
            details={
                "model": model,
                "tags": tags,
            },
        )

    @staticmethod
    def tag_result_accepted(
        model: str,
        fallback: bool,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TAG_RESULT_ACCEPTED,
            entity_type="draft",
            correlation_id=correlation_id,
            description=f"Tag result accepted ({model})",
            details={
                "model": model,
                "fallback": fallback,
            },
        )

    @staticmethod
    def tag_result_rejected(
        reason: str,
        message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TAG_RESULT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="draft",
            correlation_id=correlation_id,
            description=f"Tag result rejected: {reason}",
            error_code=reason,
            error_message=message,
        )

    @staticmethod
    def item_saved(
        item_id: UUID,
        title: str,
        model: Optional[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_SAVED,
            entity_type="item",
            entity_id=item_id,
            correlation_id=correlation_id,
            description=f"Card saved: {title[:80]}",
            details={
                "ai_model": model,
            },
            is_user_action=True,
        )

    @staticmethod
    def item_updated(
        item_id: UUID,
        title: str,
        model: Optional[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_UPDATED,
            entity_type="item",
            entity_id=item_id,
            correlation_id=correlation_id,
            description=f"Card updated: {title[:80]}",
            details={
                "ai_model": model,
            },
            is_user_action=True,
        )

    @staticmethod
    def item_deleted(
        item_id: UUID,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_DELETED,
            entity_type="item",
            entity_id=item_id,
            correlation_id=correlation_id,
            description="Card deleted",
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        error_message: str,
        correlation_id: UUID,
        item_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="item",
            entity_id=item_id,
            correlation_id=correlation_id,
            description="Card could not be written to storage",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
                **(details or {}),
            },
            correlation_id=correlation_id,
        )
