"""
Shared fixtures for Info Cards tests.

No real API calls in tests: Gemini transports are scripted fakes, storage
is in memory.
"""

from typing import Optional
from uuid import UUID

import pytest

from infocards.agents import TagAgent
from infocards.config import AppSettings, GeminiSettings
from infocards.errors import RemoteCallFailedError
from infocards.models.audit import AuditEvent
from infocards.models.item import Item
from infocards.services.storage.interface import (
    AuditStorageInterface,
    ItemStorageInterface,
    NotFoundError,
)

VALID_GEMINI_KEY = "AIza" + "S" * 35

MODEL_JSON = '{"tags": ["映画", "Netflix"], "summary": "Netflixの解約", "confidence": 0.9}'


class ScriptedTransport:
    """Fake Gemini transport answering from a {model: outcome} script.

    An outcome is response text, or an exception to raise.
    """

    def __init__(self, name: str, script: Optional[dict] = None, default=None):
        self.name = name
        self.script = script or {}
        self.default = default
        self.calls: list[str] = []

    def label(self, model: str) -> str:
        return model if self.name == "sdk" else f"{self.name}:{model}"

    async def generate(self, model: str, prompt: str) -> str:
        self.calls.append(model)
        outcome = self.script.get(model, self.default)
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is None:
            raise RemoteCallFailedError(self.name, model, "network down")
        return outcome


class InMemoryItemStorage(ItemStorageInterface):
    """Dict-backed card storage."""

    def __init__(self):
        self.items: dict[UUID, Item] = {}

    async def save_item(self, item: Item) -> bool:
        self.items[item.id] = item
        return True

    async def get_item_by_id(self, item_id: UUID) -> Optional[Item]:
        return self.items.get(item_id)

    async def update_item(self, item: Item) -> bool:
        if item.id not in self.items:
            raise NotFoundError(f"Item not found: {item.id}")
        self.items[item.id] = item
        return True

    async def delete_item(self, item_id: UUID) -> bool:
        return self.items.pop(item_id, None) is not None

    async def list_items(self, limit: int = 100) -> list[Item]:
        items = sorted(self.items.values(), key=lambda i: i.created_at, reverse=True)
        return items[:limit]


class InMemoryAuditStorage(AuditStorageInterface):
    """List-backed audit storage."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self.events if e.correlation_id == correlation_id]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self.events))[:limit]


@pytest.fixture
def valid_key() -> str:
    return VALID_GEMINI_KEY


@pytest.fixture
def scripted():
    """The ScriptedTransport class."""
    return ScriptedTransport


@pytest.fixture
def make_agent():
    """Build a TagAgent with explicit settings and optional fake transports."""
    def _make(transports=None, api_key=VALID_GEMINI_KEY, model=None, audit_logger=None):
        gemini = GeminiSettings(
            api_key=api_key,
            model=model,
            fallback_models=["gemini-1.5-flash", "gemini-2.0-flash"],
        )
        return TagAgent(
            gemini_settings=gemini,
            app_settings=AppSettings(),
            transports=transports,
            audit_logger=audit_logger,
        )
    return _make


@pytest.fixture
def model_json() -> str:
    return MODEL_JSON


@pytest.fixture
def item_storage() -> InMemoryItemStorage:
    return InMemoryItemStorage()


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()
