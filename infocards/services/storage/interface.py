"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a document database later
2. Use in-memory storage for testing
3. Keep tagging logic decoupled from storage implementation

The tagging core only shapes the tag-bearing fields of an Item. Id
assignment, timestamps on disk and change fan-out belong to the store.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from infocards.models.audit import AuditEvent
from infocards.models.item import Item


class ItemStorageInterface(ABC):
    """
    Abstract interface for card storage operations.

    Any storage implementation (Google Sheets, Firestore, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def save_item(self, item: Item) -> bool:
        """
        Save a new card to storage.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_item_by_id(self, item_id: UUID) -> Optional[Item]:
        """
        Retrieve a card by its ID.

        Returns:
            The card if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_item(self, item: Item) -> bool:
        """
        Update an existing card.

        Raises:
            StorageError: If update fails
            NotFoundError: If the card doesn't exist
        """
        pass

    @abstractmethod
    async def delete_item(self, item_id: UUID) -> bool:
        """
        Delete a card by ID.

        Returns:
            True if deleted, False if there was nothing to delete
        """
        pass

    @abstractmethod
    async def list_items(self, limit: int = 100) -> list[Item]:
        """
        List cards ordered by creation time, newest first.

        Args:
            limit: Maximum number of results
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events of one flow, in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get the most recent audit events (newest first)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
