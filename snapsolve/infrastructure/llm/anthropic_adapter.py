from typing import Optional, Sequence

import anthropic

from snapsolve.core.config import Settings
from snapsolve.infrastructure.llm.base import ProviderAdapter
from snapsolve.models.context import ImagePayload, ProviderConfig
from snapsolve.models.types import ProviderKind


class AnthropicAdapter(ProviderAdapter):
    """Message-API backend (Claude)."""

    kind = ProviderKind.ANTHROPIC

    def __init__(self, config: ProviderConfig, settings: Optional[Settings] = None) -> None:
        super().__init__(config, settings)
        self._client = anthropic.AsyncAnthropic(
            api_key=config.api_key,
            timeout=self.settings.request_timeout_sec,
            max_retries=self.settings.provider_max_retries,
        )

    async def _complete(
        self,
        model: str,
        system: str,
        user_text: str,
        images: Sequence[ImagePayload],
        max_tokens: int,
    ) -> str:
        content = [{"type": "text", "text": user_text}]
        for image in images:
            content.append(
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": image.media_type,
                        "data": image.data,
                    },
                }
            )

        response = await self._client.messages.create(
            model=model,
            max_tokens=max_tokens,
            system=system,
            temperature=self.settings.temperature,
            messages=[{"role": "user", "content": content}],
        )

        raw_text = ""
        for block in response.content:
            if getattr(block, "type", None) == "text":
                raw_text += block.text
        return raw_text
