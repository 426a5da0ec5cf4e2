import json
import logging
from typing import AsyncIterator, List, Optional

import httpx

from .base import BaseProvider, iter_sse_data
from .errors import ProviderStreamError

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(BaseProvider):
    """OpenAI chat-completions 格式的 Provider（openai 官方及 groq / mistral 等兼容供应商）"""

    def __init__(self, endpoint: Optional[str] = None, provider_id: str = "openai", label: str = "OpenAI"):
        super().__init__(endpoint or "https://api.openai.com/v1/chat/completions")
        self.provider_id = provider_id
        self.label = label

    def build_request(self, client: httpx.AsyncClient, model: str, messages: List[dict], api_key: str) -> httpx.Request:
        return client.build_request(
            "POST",
            self.endpoint,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Accept": "text/event-stream"
            },
            json={
                "model": model,
                "messages": messages,
                "stream": True
            }
        )

    async def iter_text(self, response: httpx.Response) -> AsyncIterator[str]:
        async for data in iter_sse_data(response.aiter_lines()):
            if data.strip() == "[DONE]":
                return
            try:
                chunk = json.loads(data)
            except ValueError:
                logger.debug("%s: 跳过无法解析的数据行: %r", self.provider_id, data[:200])
                continue
            if not isinstance(chunk, dict):
                continue
            error = chunk.get("error")
            if error:
                message = error.get("message") if isinstance(error, dict) else str(error)
                raise ProviderStreamError(f"{self.label} stream error: {message or 'unknown error'}")
            choices = chunk.get("choices")
            if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
                continue
            delta = choices[0].get("delta")
            if not isinstance(delta, dict):
                continue
            content = delta.get("content")
            if isinstance(content, str) and content:
                yield content
