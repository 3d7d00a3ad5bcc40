from typing import Any, Dict, Optional, Sequence

import httpx

from snapsolve.core.config import Settings
from snapsolve.domain.exceptions import EmptyResponseError
from snapsolve.infrastructure.llm.base import ProviderAdapter
from snapsolve.models.context import ImagePayload, ProviderConfig
from snapsolve.models.types import ProviderKind


class GeminiAdapter(ProviderAdapter):
    """Text-generation backend over the Gemini REST API.

    A client is opened per call so that cancelling the call also closes its
    connection. ``transport`` lets tests plug in ``httpx.MockTransport``.
    """

    kind = ProviderKind.GEMINI

    def __init__(
        self,
        config: ProviderConfig,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(config, settings)
        self._transport = transport

    def build_body(
        self, system: str, user_text: str, images: Sequence[ImagePayload], max_tokens: int
    ) -> Dict[str, Any]:
        parts: list = [{"text": f"{system}\n\n{user_text}"}]
        parts.extend(
            {"inlineData": {"mimeType": image.media_type, "data": image.data}}
            for image in images
        )
        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "temperature": self.settings.temperature,
                "maxOutputTokens": max_tokens,
            },
        }

    async def _complete(
        self,
        model: str,
        system: str,
        user_text: str,
        images: Sequence[ImagePayload],
        max_tokens: int,
    ) -> str:
        async with httpx.AsyncClient(
            base_url=self.settings.gemini_base_url,
            timeout=self.settings.request_timeout_sec,
            transport=self._transport,
        ) as client:
            resp = await client.post(
                f"/models/{model}:generateContent",
                headers={"x-goog-api-key": self.config.api_key or ""},
                json=self.build_body(system, user_text, images, max_tokens),
            )
            resp.raise_for_status()
            data = resp.json()

        candidates = data.get("candidates") or []
        if not candidates:
            raise EmptyResponseError(provider=self.label)
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))
