"""
Data Models Package

All data flowing through tagging and storage conforms to these schemas.
"""

from infocards.models.item import (
    Draft,
    Item,
    ItemType,
    TagResult,
)
from infocards.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Card models
    "Draft",
    "Item",
    "ItemType",
    "TagResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
