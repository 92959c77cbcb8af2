"""
Tag Agent

Turns a Draft into a TagResult using Gemini, with the enrichment engine as
both a widener of model output and a fallback.

DESIGN DECISION: The agent never raises for remote problems. Network
errors, bad statuses and unreadable output are recorded and the next
attempt is tried; when nothing works the heuristic result is returned with
`fallback=True` and the last error. The caller (the tag gate) decides
whether a degraded result is good enough.

Only input validation raises: InputTooShortError and InputTooLargeError,
before any remote call.

ATTEMPT PLAN:
    for each model (configured model, then the fallback models, deduped):
        1. SDK transport
        2. REST transport
    First success wins. Attempts run one after another, never in parallel,
    so at most one paid call is in flight per draft.
"""

import re
from typing import NamedTuple, Optional, Sequence
from uuid import UUID

from infocards.agents.transports import GeminiTransport, RestTransport, SdkTransport
from infocards.audit.logger import AuditLogger, get_logger
from infocards.config import AppSettings, GeminiSettings, get_settings
from infocards.errors import (
    InputTooLargeError,
    InputTooShortError,
    ParseFailedError,
    RemoteCallFailedError,
)
from infocards.models.item import Draft, TagResult
from infocards.tagging import vocabulary as vocab
from infocards.tagging.enrichment import enrich, heuristic_result, normalize_draft_text
from infocards.tagging.parsing import MalformedOutput, ParsedOutput, parse_model_output

logger = get_logger(__name__)

MODEL_CONFIDENCE = 0.7

GOOGLE_KEY_PATTERN = re.compile(r"^AIza[0-9A-Za-z_\-]{20,}$")

MODEL_FORCE = "heuristic:force"
MODEL_NO_KEY = "heuristic:no-key"
MODEL_BAD_KEY = "heuristic:bad-key"
MODEL_FALLBACK = "heuristic:fallback"
MODEL_ERROR = "heuristic:error"

NO_KEY_MESSAGE = "GEMINI_API_KEY が未設定です。"
BAD_KEY_MESSAGE = (
    "GEMINI_API_KEY が Google 形式ではありません。"
    "`AIza...` で始まるキーを設定してください。"
)


class AttemptPlan(NamedTuple):
    """One (model, transport) pair of the attempt plan."""

    model: str
    transport: GeminiTransport


def error_message(error: object) -> str:
    """Readable description of whatever was raised or recorded."""
    if error is None:
        return "no model attempt was made"
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    return str(error)


def build_prompt(draft: Draft, min_tags: int = 6, max_tags: int = 10) -> str:
    """Instruction prompt embedding the draft fields."""
    return f"""あなたは日本語で「タイトル/メモ」からタグを返す分類器です。
**必ず次のJSONだけ** を返してください（解説や文章は禁止）:
{{"tags":["タグ1","タグ2", ...], "summary":"要約", "confidence":0.0～1.0}}

厳守:
- tags は **最低{min_tags}個・最大{max_tags}個**、重複なし、日本語の短い名詞を中心に。内容に**緩やかに関連**していれば採用可（検索性重視）。
- "type"はメタ情報。**タグ決定に使ってはいけません**（"account"/"todo"/"subscription"/"memo" からタグは作らない）。
- 有名サービス名（YouTube/Netflix/Spotify…）から連想カテゴリ（サブスク/動画/音楽/Google 等）を加えて良い。
- 地名（東京/京都/大阪 等）があれば、状況に応じて「地名」「旅行」「日本」「関東/関西」等を検討。
- 曖昧な単語だけでも、内容無関係のタグ（例: サブスク/動画 など）を**無理に**入れない。

入力:
- title="{draft.title}"
- type="{draft.type}"  ※参照のみ。タグ決定に使わない
- note="{draft.note or ''}"
- url="{draft.url or ''}"

固定候補（使っても良い）: {', '.join(vocab.FIXED_TAGS)}"""


class TagAgent:
    """
    AI agent for card tagging.

    RESPONSIBILITIES:
    - Validate draft size before any remote call
    - Walk the attempt plan until a model answers
    - Widen model tags with the enrichment engine
    - Fall back to the heuristic when no model answers

    BOUNDARIES:
    - NEVER persists cards (audit events only)
    - NEVER raises for remote failures
    """

    def __init__(
        self,
        gemini_settings: Optional[GeminiSettings] = None,
        app_settings: Optional[AppSettings] = None,
        transports: Optional[Sequence[GeminiTransport]] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._gemini = gemini_settings or get_settings().gemini
        self._app = app_settings or get_settings().app
        self._transports = list(transports) if transports is not None else None
        self._audit_logger = audit_logger

    # -------------------------------------------------------------------------
    # Input checks
    # -------------------------------------------------------------------------

    def validate_draft(self, draft: Draft) -> None:
        """
        Reject drafts that are too short or too large to tag.

        Raises:
            InputTooShortError: trimmed title + note below the minimum.
            InputTooLargeError: trimmed title or note above its limit.
        """
        title_length = len(draft.title.strip())
        note_length = len((draft.note or "").strip())

        if title_length + note_length < self._app.min_content_length:
            raise InputTooShortError(
                title_length + note_length, self._app.min_content_length
            )
        if title_length > self._app.max_title_length:
            raise InputTooLargeError("title", title_length, self._app.max_title_length)
        if note_length > self._app.max_note_length:
            raise InputTooLargeError("note", note_length, self._app.max_note_length)

    # -------------------------------------------------------------------------
    # Attempt plan
    # -------------------------------------------------------------------------

    def _build_transports(self, api_key: str) -> list[GeminiTransport]:
        if self._transports is not None:
            return self._transports
        return [
            SdkTransport(
                api_key,
                temperature=self._gemini.temperature,
                max_output_tokens=self._gemini.max_output_tokens,
            ),
            RestTransport(
                api_key,
                base_url=self._gemini.rest_base_url,
                timeout=self._gemini.request_timeout_seconds,
                temperature=self._gemini.temperature,
                max_output_tokens=self._gemini.max_output_tokens,
            ),
        ]

    def attempt_plan(self, api_key: str) -> list[AttemptPlan]:
        """Ordered (model, transport) pairs: every transport per model."""
        transports = self._build_transports(api_key)
        return [
            AttemptPlan(model, transport)
            for model in self._gemini.candidate_models
            for transport in transports
        ]

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def _heuristic(
        self,
        draft: Draft,
        model: str,
        error: Optional[str] = None,
    ) -> TagResult:
        return heuristic_result(
            draft,
            model=model,
            error=error,
            min_tags=self._app.min_tags,
            max_tags=self._app.max_tags,
            preview_length=self._app.summary_preview_length,
        )

    def _model_result(
        self,
        draft: Draft,
        parsed: ParsedOutput,
        model_label: str,
        raw: Optional[str],
    ) -> TagResult:
        """Merge model output with the enrichment engine."""
        tags = enrich(
            parsed.tags,
            normalize_draft_text(draft),
            url=draft.url,
            min_tags=self._app.min_tags,
            max_tags=self._app.max_tags,
        )
        model_tags = [t for t in parsed.tags if t.strip()]
        return TagResult(
            tags=tags,
            summary=parsed.summary or draft.title,
            confidence=(
                parsed.confidence if parsed.confidence is not None
                else MODEL_CONFIDENCE
            ),
            model=model_label,
            fallback=not model_tags,
            raw=raw,
        )

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    async def _run_plan(
        self,
        draft: Draft,
        api_key: str,
        trace: bool,
        correlation_id: Optional[UUID] = None,
    ) -> TagResult:
        prompt = build_prompt(draft, self._app.min_tags, self._app.max_tags)
        last_error: Optional[Exception] = None

        for attempt in self.attempt_plan(api_key):
            transport = attempt.transport
            logger.debug(
                "tag_attempt_started",
                model=attempt.model,
                transport=transport.name,
            )
            try:
                text = await transport.generate(attempt.model, prompt)
            except RemoteCallFailedError as e:
                last_error = e
                logger.warning(
                    "tag_attempt_failed",
                    model=attempt.model,
                    transport=transport.name,
                    error=str(e),
                )
                if self._audit_logger:
                    await self._audit_logger.log_external_service_error(
                        service=f"gemini-{transport.name}",
                        error_message=str(e),
                        correlation_id=correlation_id,
                        details={"model": attempt.model},
                    )
                continue

            parsed = parse_model_output(text)
            if isinstance(parsed, MalformedOutput):
                last_error = ParseFailedError(transport.name, attempt.model, parsed.reason)
                logger.warning(
                    "tag_output_unparsable",
                    model=attempt.model,
                    transport=transport.name,
                    reason=parsed.reason,
                )
                continue

            result = self._model_result(
                draft,
                parsed,
                transport.label(attempt.model),
                raw=text if trace else None,
            )
            logger.info(
                "tag_attempt_succeeded",
                model=result.model,
                model_tag_count=len(parsed.tags),
                fallback=result.fallback,
            )
            return result

        logger.warning("tag_attempts_exhausted", error=error_message(last_error))
        return self._heuristic(draft, MODEL_FALLBACK, error=error_message(last_error))

    async def generate(
        self,
        draft: Draft,
        trace: bool = False,
        force_heuristic: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> TagResult:
        """
        Produce tags for a draft.

        Args:
            draft: The card fields to tag.
            trace: Include the raw model text in the result.
            force_heuristic: Skip every remote call (debug/test mode).
            correlation_id: Ties failed attempts to the caller's audit trail.

        Returns:
            A TagResult. `fallback=True` whenever the heuristic was used.

        Raises:
            InputTooShortError, InputTooLargeError: before any remote call.
        """
        self.validate_draft(draft)

        if force_heuristic:
            return self._heuristic(draft, MODEL_FORCE)

        api_key = self._gemini.api_key
        if not api_key:
            logger.warning("gemini_key_missing")
            return self._heuristic(draft, MODEL_NO_KEY, error=NO_KEY_MESSAGE)
        if not GOOGLE_KEY_PATTERN.match(api_key):
            logger.warning("gemini_key_malformed")
            return self._heuristic(draft, MODEL_BAD_KEY, error=BAD_KEY_MESSAGE)

        try:
            return await self._run_plan(draft, api_key, trace, correlation_id)
        except Exception as e:
            # Degraded result instead of a hard failure; the gate decides
            logger.exception("tag_generation_crashed", error=error_message(e))
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=error_message(e),
                    details={"stage": "tag_generation"},
                    correlation_id=correlation_id,
                )
            return self._heuristic(draft, MODEL_ERROR, error=error_message(e))
