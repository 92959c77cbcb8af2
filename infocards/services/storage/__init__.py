"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements Google Sheets as the backend, but designed to be swappable.
"""

from infocards.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    ItemStorageInterface,
    NotFoundError,
    StorageError,
)
from infocards.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsItemStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "ItemStorageInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsItemStorage",
]
