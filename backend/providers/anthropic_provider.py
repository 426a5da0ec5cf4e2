import json
import logging
from typing import AsyncIterator, List, Optional

import httpx

from .base import BaseProvider, iter_sse_data
from .errors import ProviderStreamError

logger = logging.getLogger(__name__)


class AnthropicProvider(BaseProvider):
    """Anthropic Claude Provider (Messages API)"""

    provider_id = "anthropic"
    label = "Anthropic"

    def __init__(self, endpoint: Optional[str] = None, max_tokens: int = 1024, api_version: str = "2023-06-01"):
        super().__init__(endpoint or "https://api.anthropic.com/v1/messages")
        self.max_tokens = max_tokens
        self.api_version = api_version

    def build_request(self, client: httpx.AsyncClient, model: str, messages: List[dict], api_key: str) -> httpx.Request:
        # Messages API 不接受 system 角色，单独放到顶层 system 字段
        system_parts = []
        user_messages = []
        for msg in messages:
            if msg["role"] == "system":
                system_parts.append(msg["content"])
            else:
                user_messages.append({"role": msg["role"], "content": msg["content"]})

        body = {
            "model": model,
            "max_tokens": self.max_tokens,
            "messages": user_messages,
            "stream": True
        }
        if system_parts:
            body["system"] = "\n\n".join(system_parts)

        return client.build_request(
            "POST",
            self.endpoint,
            headers={
                "x-api-key": api_key,
                "anthropic-version": self.api_version,
                "Content-Type": "application/json"
            },
            json=body
        )

    async def iter_text(self, response: httpx.Response) -> AsyncIterator[str]:
        async for data in iter_sse_data(response.aiter_lines()):
            try:
                event = json.loads(data)
            except ValueError:
                logger.debug("anthropic: 跳过无法解析的事件: %r", data[:200])
                continue
            if not isinstance(event, dict):
                continue

            event_type = event.get("type")
            if event_type == "content_block_delta":
                delta = event.get("delta")
                if not isinstance(delta, dict) or delta.get("type") != "text_delta":
                    continue
                text = delta.get("text")
                if isinstance(text, str) and text:
                    yield text
            elif event_type == "message_stop":
                return
            elif event_type == "error":
                error = event.get("error")
                if not isinstance(error, dict):
                    error = {"message": str(error)} if error else {}
                raise ProviderStreamError(
                    f"Anthropic stream error: {error.get('message') or error.get('type') or 'unknown error'}"
                )
