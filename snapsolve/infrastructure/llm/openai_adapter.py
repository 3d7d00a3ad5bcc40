from typing import Dict, Optional, Sequence, Tuple

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from snapsolve.core.config import Settings
from snapsolve.infrastructure.llm.base import ProviderAdapter
from snapsolve.models.context import ImagePayload, ProviderConfig
from snapsolve.models.types import ProviderKind


class OpenAIAdapter(ProviderAdapter):
    """Vision-chat backend through LangChain's ChatOpenAI."""

    kind = ProviderKind.OPENAI

    def __init__(self, config: ProviderConfig, settings: Optional[Settings] = None) -> None:
        super().__init__(config, settings)
        self._clients: Dict[Tuple[str, int], ChatOpenAI] = {}

    def client_for(self, model: str, max_tokens: int) -> ChatOpenAI:
        key = (model, max_tokens)
        if key not in self._clients:
            self._clients[key] = ChatOpenAI(
                api_key=self.config.api_key,
                model=model,
                temperature=self.settings.temperature,
                max_tokens=max_tokens,
                timeout=self.settings.request_timeout_sec,
                max_retries=self.settings.provider_max_retries,
            )
        return self._clients[key]

    async def _complete(
        self,
        model: str,
        system: str,
        user_text: str,
        images: Sequence[ImagePayload],
        max_tokens: int,
    ) -> str:
        content = [{"type": "text", "text": user_text}]
        content.extend(
            {
                "type": "image_url",
                "image_url": {"url": f"data:{image.media_type};base64,{image.data}"},
            }
            for image in images
        )
        message = await self.client_for(model, max_tokens).ainvoke(
            [SystemMessage(content=system), HumanMessage(content=content)]
        )
        return _message_text(message.content)


def _message_text(content) -> str:
    if isinstance(content, str):
        return content
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)
