"""
Audit Logger

DESIGN DECISION: Every tagging attempt, gate decision and card write is
logged. The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events

Local structured logging (structlog, JSON lines) is configured here once
for the whole package; modules get their logger through get_logger().
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from infocards.config import get_settings
from infocards.models.audit import AuditEvent, AuditEventBuilder
from infocards.services.storage.interface import AuditStorageInterface


def configure_logging(level: Optional[str] = None) -> None:
    """Configure stdlib logging and structlog (JSON renderer)."""
    level_name = (level or get_settings().app.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(message)s",
        stream=sys.stdout,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None):
    """Get a structlog logger bound to `name`."""
    return structlog.get_logger(name)


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = get_logger("infocards.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_tagging_requested(
        self,
        title: str,
        item_type: str,
        forced: bool,
        correlation_id: UUID,
    ) -> None:
        """Log a tagging request."""
        await self.log(AuditEventBuilder.tagging_requested(
            title=title,
            item_type=item_type,
            forced=forced,
            correlation_id=correlation_id,
        ))

    async def log_input_rejected(
        self,
        reason: str,
        message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a draft refused before tagging."""
        await self.log(AuditEventBuilder.input_rejected(
            reason=reason,
            message=message,
            correlation_id=correlation_id,
        ))

    async def log_tagging_completed(
        self,
        model: str,
        tags: list[str],
        fallback: bool,
        correlation_id: UUID,
        error: Optional[str] = None,
    ) -> None:
        """Log the outcome of a tagging attempt."""
        await self.log(AuditEventBuilder.tagging_completed(
            model=model,
            tags=tags,
            fallback=fallback,
            correlation_id=correlation_id,
            error=error,
        ))

    async def log_tag_result_accepted(
        self,
        model: str,
        fallback: bool,
        correlation_id: UUID,
    ) -> None:
        """Log a gate acceptance."""
        await self.log(AuditEventBuilder.tag_result_accepted(
            model=model,
            fallback=fallback,
            correlation_id=correlation_id,
        ))

    async def log_tag_result_rejected(
        self,
        reason: str,
        message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a gate rejection."""
        await self.log(AuditEventBuilder.tag_result_rejected(
            reason=reason,
            message=message,
            correlation_id=correlation_id,
        ))

    async def log_item_saved(
        self,
        item_id: UUID,
        title: str,
        model: Optional[str],
        correlation_id: UUID,
    ) -> None:
        """Log card creation."""
        await self.log(AuditEventBuilder.item_saved(
            item_id=item_id,
            title=title,
            model=model,
            correlation_id=correlation_id,
        ))

    async def log_item_updated(
        self,
        item_id: UUID,
        title: str,
        model: Optional[str],
        correlation_id: UUID,
    ) -> None:
        """Log card update."""
        await self.log(AuditEventBuilder.item_updated(
            item_id=item_id,
            title=title,
            model=model,
            correlation_id=correlation_id,
        ))

    async def log_item_deleted(
        self,
        item_id: UUID,
        correlation_id: UUID,
    ) -> None:
        """Log card deletion."""
        await self.log(AuditEventBuilder.item_deleted(
            item_id=item_id,
            correlation_id=correlation_id,
        ))

    async def log_save_failed(
        self,
        error_message: str,
        correlation_id: UUID,
        item_id: Optional[UUID] = None,
    ) -> None:
        """Log a storage write failure."""
        await self.log(AuditEventBuilder.save_failed(
            error_message=error_message,
            correlation_id=correlation_id,
            item_id=item_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Log external service error."""
        await self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
            details=details,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., adding a card).
    Pass it through all subsequent operations.
    """
    return uuid4()
