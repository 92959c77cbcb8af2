"""
Error Taxonomy for Info Cards

Only input validation failures and gate rejections reach the caller.
Remote call and parse failures are absorbed by the tag agent and turned
into a degraded (fallback) TagResult.

Messages are user-facing and shown verbatim, so they are in Japanese.
"""

from typing import Optional


class InfoCardsError(Exception):
    """Base exception for the application."""
    pass


# =============================================================================
# INPUT VALIDATION - surfaced to the caller, HTTP 4xx at the boundary
# =============================================================================

class InputValidationError(InfoCardsError):
    """The draft cannot be tagged as submitted."""

    status_code = 400
    public_message = "invalid body"


class InvalidBodyError(InputValidationError):
    """Request body is not a draft."""
    pass


class InputTooShortError(InputValidationError):
    """Combined title and note are too short to tag."""

    public_message = "text too short"

    def __init__(self, length: int, minimum: int):
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"タイトル/メモが短すぎます（{minimum}文字以上にしてください）"
        )


class InputTooLargeError(InputValidationError):
    """Title or note exceeds its size limit."""

    status_code = 413
    public_message = "input too large"

    def __init__(self, field: str, length: int, maximum: int):
        self.field = field
        self.length = length
        self.maximum = maximum
        super().__init__(
            f"{field} が長すぎます（{length}文字、上限 {maximum}文字）"
        )


# =============================================================================
# REMOTE GENERATION - never surfaced raw, recorded as last_error
# =============================================================================

class RemoteCallFailedError(InfoCardsError):
    """A model backend call failed (network, HTTP status, SDK error)."""

    def __init__(self, transport: str, model: str, message: str):
        self.transport = transport
        self.model = model
        super().__init__(f"{transport} {model}: {message}")


class ParseFailedError(InfoCardsError):
    """Model output could not be read as a tag object."""

    def __init__(self, transport: str, model: str, reason: str):
        self.transport = transport
        self.model = model
        self.reason = reason
        super().__init__(f"{transport} {model}: unparsable output ({reason})")


# =============================================================================
# TAG GATE - surfaced to the caller, blocks persistence
# =============================================================================

class TagGateError(InfoCardsError):
    """A tag result was refused by the gate."""
    pass


class EmptyTagsError(TagGateError):
    """The result carries no tags."""

    def __init__(self, raw_hint: str = ""):
        super().__init__(f"AIタグが生成されませんでした（tags: []）{raw_hint}")


class FallbackRejectedError(TagGateError):
    """The result came from the heuristic and fallbacks are not allowed."""

    def __init__(
        self,
        model: str,
        error: Optional[str] = None,
        raw_hint: str = "",
    ):
        self.model = model
        self.error = error
        detail = f" / error={error}" if error else ""
        super().__init__(
            f"AI生成に失敗しヒューリスティックにフォールバックしました"
            f"（model={model}）。{detail}{raw_hint}"
        )


# =============================================================================
# REMOTE TAGGING CLIENT
# =============================================================================

class TagRequestError(InfoCardsError):
    """Calling the tagging endpoint failed or returned an unusable answer."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
