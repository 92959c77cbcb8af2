"""
Gemini Transports

Two ways to reach the same logical Gemini endpoint:
1. SDK  - google-generativeai GenerativeModel, JSON-constrained output
2. REST - raw POST to models/{model}:generateContent through httpx

Both take a model id and a prompt and return the response text.
Any failure is raised as RemoteCallFailedError so the tag agent can record
it and move on to the next attempt.
"""

from typing import Optional, Protocol
from urllib.parse import quote

import google.generativeai as genai
import httpx

from infocards.errors import RemoteCallFailedError


class GeminiTransport(Protocol):
    """One way of calling a Gemini model."""

    name: str

    def label(self, model: str) -> str:
        """Model id as recorded in TagResult.model."""
        ...

    async def generate(self, model: str, prompt: str) -> str:
        """Return raw response text. Raises RemoteCallFailedError."""
        ...


class SdkTransport:
    """Calls Gemini through the google-generativeai SDK."""

    name = "sdk"

    def __init__(
        self,
        api_key: str,
        temperature: float = 0.4,
        max_output_tokens: int = 512,
    ):
        self._api_key = api_key
        self._generation_config = {
            "temperature": temperature,
            "max_output_tokens": max_output_tokens,
            "response_mime_type": "application/json",  # JSON only
        }
        self._configured = False

    def _configure_genai(self):
        """Configure Google Generative AI once per transport."""
        if not self._configured:
            genai.configure(api_key=self._api_key)
            self._configured = True

    def label(self, model: str) -> str:
        return model

    async def generate(self, model: str, prompt: str) -> str:
        try:
            self._configure_genai()
            generative_model = genai.GenerativeModel(
                model_name=model,
                generation_config=self._generation_config,
            )
            response = await generative_model.generate_content_async(prompt)
            # .text raises ValueError when the candidate was blocked
            return response.text or ""
        except Exception as e:
            raise RemoteCallFailedError(self.name, model, str(e)) from e


class RestTransport:
    """Calls the Gemini REST API directly."""

    name = "rest"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout: float = 30.0,
        temperature: float = 0.4,
        max_output_tokens: int = 512,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._generation_config = {
            "temperature": temperature,
            "maxOutputTokens": max_output_tokens,
            "responseMimeType": "application/json",
        }
        self._client = client

    def label(self, model: str) -> str:
        return f"rest:{model}"

    def _url(self, model: str) -> str:
        return f"{self._base_url}/v1beta/models/{quote(model, safe='')}:generateContent"

    @staticmethod
    def _extract_text(payload) -> str:
        """First candidate's first part: text, else inline data."""
        if not isinstance(payload, dict):
            return ""
        candidates = payload.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return ""
        first = candidates[0]
        content = first.get("content") if isinstance(first, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
            return ""

        part = parts[0]
        text = part.get("text")
        if text is None:
            inline = part.get("inlineData")
            text = inline.get("data") if isinstance(inline, dict) else None
        return text if isinstance(text, str) else ""

    async def _post(self, client: httpx.AsyncClient, model: str, prompt: str) -> httpx.Response:
        return await client.post(
            self._url(model),
            params={"key": self._api_key},
            json={
                "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                "generationConfig": self._generation_config,
            },
        )

    async def generate(self, model: str, prompt: str) -> str:
        try:
            if self._client is not None:
                response = await self._post(self._client, model, prompt)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await self._post(client, model, prompt)
        except httpx.HTTPError as e:
            raise RemoteCallFailedError(self.name, model, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise RemoteCallFailedError(self.name, model, f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteCallFailedError(self.name, model, f"non-JSON body: {e}") from e

        return self._extract_text(payload)
