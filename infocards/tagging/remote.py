"""
Remote Tagging Client

Caller side of the tagging endpoint: posts a draft, reads the TagResult and
runs it through the tag gate. Every failure becomes a TagRequestError or a
gate error with a message that can be shown to the user as is.
"""

from typing import Optional

import httpx
from pydantic import ValidationError

from infocards.errors import InputTooShortError, TagRequestError
from infocards.models.item import Draft, TagResult
from infocards.tagging.gate import accept

BODY_PREVIEW_LENGTH = 400
MIN_CONTENT_LENGTH = 3


def _trim_preview(text: str, max_length: int = BODY_PREVIEW_LENGTH) -> str:
    if len(text) > max_length:
        return text[:max_length] + " …(truncated)"
    return text


class RemoteTagClient:
    """
    Client for POST /api/ai-tag.

    Args:
        base_url: Server root, e.g. "http://localhost:8000".
        endpoint: Path of the tagging endpoint.
        client: Optional httpx.AsyncClient (tests, connection reuse).
    """

    def __init__(
        self,
        base_url: str = "",
        endpoint: str = "/api/ai-tag",
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._endpoint = endpoint
        self._timeout = timeout
        self._client = client

    async def _post(self, url: str, params: dict, body: dict) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, params=params, json=body)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(url, params=params, json=body)

    async def request(self, draft: Draft, trace: bool = False) -> TagResult:
        """POST the draft and return the server's TagResult, ungated."""
        # Short input always gives the same generic tags; stop it here
        if draft.content_length < MIN_CONTENT_LENGTH:
            raise InputTooShortError(draft.content_length, MIN_CONTENT_LENGTH)

        url = f"{self._base_url}{self._endpoint}"
        params = {"trace": "1"} if trace else {}
        try:
            response = await self._post(url, params, draft.model_dump(exclude_none=True))
        except httpx.HTTPError as e:
            raise TagRequestError(
                f"AIタグAPIへの通信に失敗しました（fetch失敗）: {e}"
            ) from e

        try:
            data = response.json()
        except ValueError:
            body = response.text or "(empty)"
            raise TagRequestError(
                f"AIタグAPIのレスポンスを解析できません（HTTP {response.status_code}）。"
                f"本文: {_trim_preview(body)}",
                status_code=response.status_code,
            )

        if not response.is_success:
            message = data.get("error") if isinstance(data, dict) else None
            raise TagRequestError(
                message or f"AIタグAPIエラー（HTTP {response.status_code} {response.reason_phrase}）",
                status_code=response.status_code,
            )

        try:
            return TagResult.model_validate(data)
        except ValidationError as e:
            raise TagRequestError(
                f"AIタグAPIのレスポンス形式が不正です: {_trim_preview(str(e))}",
                status_code=response.status_code,
            ) from e

    async def tag(
        self,
        draft: Draft,
        allow_fallback: bool = False,
        trace: bool = False,
    ) -> TagResult:
        """
        Tag a draft through the endpoint and gate the result.

        Raises:
            InputTooShortError: before any request.
            TagRequestError: transport, body or HTTP status problems.
            EmptyTagsError, FallbackRejectedError: from the gate.
        """
        result = await self.request(draft, trace=trace)
        return accept(result, allow_fallback=allow_fallback)
