"""
Main Orchestrator for Info Cards

Ties the tag agent, the tag gate, storage and the audit trail together:

    draft -> TagAgent.generate -> accept (gate) -> Item -> storage

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is written unless the gate accepted the tag result
- Input and gate errors propagate to the caller unchanged
- Every step is audited under one correlation id
"""

from typing import Optional
from uuid import UUID

from infocards.agents import TagAgent
from infocards.audit import AuditLogger, create_correlation_id, get_logger
from infocards.errors import InputValidationError, TagGateError
from infocards.models.item import Draft, Item, TagResult
from infocards.services.storage import (
    AuditStorageInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsItemStorage,
    ItemStorageInterface,
    NotFoundError,
    StorageError,
)
from infocards.tagging.gate import accept

logger = get_logger(__name__)


class ItemTaggingFlow:
    """
    Orchestrates card creation and editing with AI tags.

    Flow:
    1. Tag   -> TagAgent (model attempts, heuristic fallback)
    2. Gate  -> refuse empty or (by default) heuristic results
    3. Build -> new Item or merge into the existing one
    4. Save  -> persist to storage
    """

    def __init__(
        self,
        tag_agent: Optional[TagAgent] = None,
        item_storage: Optional[ItemStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._tag_agent = tag_agent or TagAgent(audit_logger=audit_logger)
        self._item_storage = item_storage
        self._audit_logger = audit_logger

    def _require_storage(self) -> ItemStorageInterface:
        if self._item_storage is None:
            raise StorageError("Item storage is not configured")
        return self._item_storage

    async def tag_draft(
        self,
        draft: Draft,
        allow_fallback: bool = False,
        trace: bool = False,
        force_heuristic: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> TagResult:
        """
        Tag a draft and pass the result through the gate.

        Raises:
            InputValidationError: the draft is too short or too large.
            TagGateError: the result has no tags, or is a refused fallback.
        """
        correlation_id = correlation_id or create_correlation_id()

        if self._audit_logger:
            await self._audit_logger.log_tagging_requested(
                title=draft.title,
                item_type=draft.type,
                forced=force_heuristic,
                correlation_id=correlation_id,
            )

        try:
            result = await self._tag_agent.generate(
                draft,
                trace=trace,
                force_heuristic=force_heuristic,
                correlation_id=correlation_id,
            )
        except InputValidationError as e:
            if self._audit_logger:
                await self._audit_logger.log_input_rejected(
                    reason=type(e).__name__,
                    message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_tagging_completed(
                model=result.model,
                tags=result.tags,
                fallback=result.fallback,
                correlation_id=correlation_id,
                error=result.error,
            )

        try:
            accepted = accept(result, allow_fallback=allow_fallback)
        except TagGateError as e:
            logger.info("tag_result_rejected", reason=type(e).__name__, model=result.model)
            if self._audit_logger:
                await self._audit_logger.log_tag_result_rejected(
                    reason=type(e).__name__,
                    message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_tag_result_accepted(
                model=accepted.model,
                fallback=accepted.fallback,
                correlation_id=correlation_id,
            )
        return accepted

    async def create_item(
        self,
        draft: Draft,
        allow_fallback: bool = False,
        force_heuristic: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> Item:
        """Tag a draft and save it as a new card."""
        storage = self._require_storage()
        correlation_id = correlation_id or create_correlation_id()

        result = await self.tag_draft(
            draft,
            allow_fallback=allow_fallback,
            force_heuristic=force_heuristic,
            correlation_id=correlation_id,
        )
        item = Item.from_draft(draft, result)

        try:
            await storage.save_item(item)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_save_failed(
                    error_message=str(e),
                    correlation_id=correlation_id,
                    item_id=item.id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_item_saved(
                item_id=item.id,
                title=item.title,
                model=item.ai_model,
                correlation_id=correlation_id,
            )
        return item

    async def update_item(
        self,
        item_id: UUID,
        draft: Draft,
        allow_fallback: bool = False,
        force_heuristic: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> Item:
        """
        Re-tag an edited card and save it.

        Raises:
            NotFoundError: no card with this id.
        """
        storage = self._require_storage()
        correlation_id = correlation_id or create_correlation_id()

        existing = await storage.get_item_by_id(item_id)
        if existing is None:
            raise NotFoundError(f"Item not found: {item_id}")

        result = await self.tag_draft(
            draft,
            allow_fallback=allow_fallback,
            force_heuristic=force_heuristic,
            correlation_id=correlation_id,
        )
        item = existing.apply_draft(draft).apply_tag_result(result)

        try:
            await storage.update_item(item)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_save_failed(
                    error_message=str(e),
                    correlation_id=correlation_id,
                    item_id=item.id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_item_updated(
                item_id=item.id,
                title=item.title,
                model=item.ai_model,
                correlation_id=correlation_id,
            )
        return item

    async def delete_item(
        self,
        item_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Delete a card. Returns False when it did not exist."""
        storage = self._require_storage()
        correlation_id = correlation_id or create_correlation_id()

        deleted = await storage.delete_item(item_id)
        if deleted and self._audit_logger:
            await self._audit_logger.log_item_deleted(
                item_id=item_id,
                correlation_id=correlation_id,
            )
        return deleted

    async def list_items(self, limit: int = 100) -> list[Item]:
        """Cards, newest first."""
        return await self._require_storage().list_items(limit=limit)


def create_app_components(
    use_storage: bool = True,
) -> tuple[ItemTaggingFlow, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False to run tagging only.

    Returns:
        (item_tagging_flow, sheets_client)
    """
    sheets_client = None
    item_storage: Optional[ItemStorageInterface] = None
    audit_storage: Optional[AuditStorageInterface] = None

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            item_storage = GoogleSheetsItemStorage(sheets_client)
            audit_storage = GoogleSheetsAuditStorage(sheets_client)
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None
            item_storage = None
            audit_storage = None

    audit_logger = AuditLogger(audit_storage)
    flow = ItemTaggingFlow(
        tag_agent=TagAgent(audit_logger=audit_logger),
        item_storage=item_storage,
        audit_logger=audit_logger,
    )
    return flow, sheets_client
