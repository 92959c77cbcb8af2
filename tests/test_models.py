"""
Tests for Info Cards models and settings

Test strategy:
1. Unit tests for individual components (models, validators)
2. Integration tests for flows (with scripted transports, in-memory storage)
3. No real API calls in tests
"""

import pytest
from datetime import datetime
from uuid import uuid4

from pydantic import ValidationError

from infocards.config import AppSettings
from infocards.models.item import Draft, Item, ItemType, TagResult
from infocards.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from infocards.services.storage.google_sheets import (
    ITEM_COLUMNS,
    item_to_row,
    row_to_item,
)


def make_tag_result(**overrides) -> TagResult:
    values = {
        "tags": ["サブスク", "動画"],
        "summary": "Netflixの解約",
        "confidence": 0.9,
        "model": "gemini-1.5-flash",
    }
    values.update(overrides)
    return TagResult(**values)


class TestDraft:
    """Tests for the tagging input model."""

    def test_draft_creation(self):
        """Only title and type are required."""
        draft = Draft(title="Netflix 解約", type="subscription")
        assert draft.note is None
        assert draft.url is None

    def test_draft_is_strict(self):
        """Numbers are not coerced to strings."""
        with pytest.raises(ValidationError):
            Draft(title=123, type="memo")

    def test_null_allowed_only_for_optional_fields(self):
        """An explicit null is allowed for optional fields only."""
        assert Draft.model_validate({"title": "t", "type": "memo", "note": None}).note is None
        with pytest.raises(ValidationError):
            Draft.model_validate({"title": None, "type": "memo"})

    def test_draft_ignores_unknown_fields(self):
        """Extra fields in the body are dropped."""
        draft = Draft.model_validate({"title": "t", "type": "memo", "tags": ["x"]})
        assert not hasattr(draft, "tags")

    def test_content_length_is_trimmed(self):
        """Whitespace around title and note does not count."""
        draft = Draft(title="  ab ", type="memo", note=" c ")
        assert draft.content_length == 3


class TestTagResult:
    """Tests for the tagging output model."""

    def test_tags_are_deduplicated_in_order(self):
        result = make_tag_result(tags=["a", "b", "a", "c", "b"])
        assert result.tags == ["a", "b", "c"]

    def test_frozen(self):
        """Results are never mutated after construction."""
        result = make_tag_result()
        with pytest.raises(ValidationError):
            result.fallback = True

    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            make_tag_result(confidence=1.5)
        with pytest.raises(ValidationError):
            make_tag_result(confidence=-0.1)

    def test_tag_count_limit(self):
        with pytest.raises(ValidationError):
            make_tag_result(tags=[f"t{i}" for i in range(13)])

    def test_to_response_omits_missing_fields(self):
        """error and raw are only present when set."""
        body = make_tag_result().to_response()
        assert "error" not in body
        assert "raw" not in body
        assert body["fallback"] is False

        body = make_tag_result(fallback=True, error="HTTP 503", raw="{}").to_response()
        assert body["error"] == "HTTP 503"
        assert body["raw"] == "{}"

    def test_is_heuristic(self):
        assert make_tag_result(model="heuristic:no-key").is_heuristic
        assert not make_tag_result(model="rest:gemini-1.5-flash").is_heuristic


class TestItem:
    """Tests for the persisted card model."""

    def test_from_draft(self):
        draft = Draft(title="Netflix 解約", type="subscription", url="", note="来月")
        item = Item.from_draft(draft, make_tag_result())
        assert item.title == "Netflix 解約"
        assert item.url is None
        assert item.note == "来月"
        assert item.tags == ["サブスク", "動画"]
        assert item.ai_model == "gemini-1.5-flash"
        assert item.ai_confidence == 0.9

    def test_item_requires_title(self):
        with pytest.raises(ValidationError):
            Item(title="")

    def test_item_default_type(self):
        assert Item(title="メモ").type == ItemType.MEMO.value

    def test_apply_draft_keeps_identity_and_tags(self):
        item = Item.from_draft(Draft(title="old", type="memo"), make_tag_result())
        edited = item.apply_draft(Draft(title=" new ", type="todo", note="n"))
        assert edited.id == item.id
        assert edited.created_at == item.created_at
        assert edited.title == "new"
        assert edited.type == "todo"
        assert edited.tags == item.tags
        assert edited.updated_at >= item.updated_at
        assert item.title == "old"

    def test_apply_tag_result_replaces_ai_fields(self):
        item = Item.from_draft(Draft(title="t", type="memo"), make_tag_result())
        retagged = item.apply_tag_result(
            make_tag_result(tags=["旅行"], summary="s", confidence=0.6, model="heuristic:force")
        )
        assert retagged.tags == ["旅行"]
        assert retagged.ai_summary == "s"
        assert retagged.ai_confidence == 0.6
        assert retagged.ai_model == "heuristic:force"
        assert retagged.title == "t"


class TestSheetsRows:
    """Tests for the Items sheet row mapping."""

    def test_row_matches_columns(self):
        item = Item.from_draft(Draft(title="t", type="memo"), make_tag_result())
        assert len(item_to_row(item)) == len(ITEM_COLUMNS)

    def test_row_round_trip_keeps_japanese_tags(self):
        draft = Draft(title="京都 旅行", type="memo", url="https://example.com", note="紅葉")
        item = Item.from_draft(draft, make_tag_result(tags=["地名", "関西"]))
        row = item_to_row(item)
        assert row[8] == '["地名", "関西"]'
        assert row_to_item(row) == item

    def test_short_row_uses_defaults(self):
        """Rows trimmed by Sheets (trailing empty cells) still load."""
        now = datetime.utcnow().isoformat()
        item = row_to_item([str(uuid4()), now, now, "title"])
        assert item.type == "memo"
        assert item.tags == []
        assert item.ai_confidence is None


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.ITEM_SAVED,
            description="Card saved",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        event = AuditEvent(
            event_type=AuditEventType.TAGGING_REQUESTED,
            description="Tagging requested",
            details={"type": "memo"},
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "tagging_requested"
        assert log_dict["details"] == {"type": "memo"}
        assert isinstance(log_dict["event_id"], str)

    def test_audit_event_to_sheets_row(self):
        event = AuditEvent(
            event_type=AuditEventType.TAGGING_COMPLETED,
            description="done",
            details={"tags": ["動画"]},
        )
        row = event.to_sheets_row()
        assert len(row) == 11
        assert row[2] == "tagging_completed"
        assert row[8] == '{"tags": ["動画"]}'

    def test_builder_tagging_completed(self):
        correlation_id = uuid4()
        event = AuditEventBuilder.tagging_completed(
            model="gemini-1.5-flash",
            tags=["a", "b"],
            fallback=False,
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.TAGGING_COMPLETED
        assert event.correlation_id == correlation_id

    def test_builder_tagging_fell_back(self):
        """Fallback results are warnings carrying the error."""
        event = AuditEventBuilder.tagging_completed(
            model="heuristic:fallback",
            tags=["a"],
            fallback=True,
            correlation_id=uuid4(),
            error="rest gemini-2.0-flash: HTTP 503",
        )
        assert event.event_type == AuditEventType.TAGGING_FELL_BACK
        assert event.severity == AuditSeverity.WARNING
        assert event.error_message == "rest gemini-2.0-flash: HTTP 503"

    def test_builder_item_saved(self):
        item_id = uuid4()
        event = AuditEventBuilder.item_saved(
            item_id=item_id,
            title="Netflix 解約",
            model="gemini-1.5-flash",
            correlation_id=uuid4(),
        )
        assert event.event_type == AuditEventType.ITEM_SAVED
        assert event.entity_id == item_id
        assert event.is_user_action is True


class TestSettings:
    """Tests for application settings."""

    def test_default_bounds(self):
        settings = AppSettings()
        assert settings.min_tags == 6
        assert settings.max_tags == 10
        assert settings.min_content_length == 3

    def test_max_below_min_rejected(self):
        with pytest.raises(ValidationError):
            AppSettings(min_tags=8, max_tags=6)
