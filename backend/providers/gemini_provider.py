import json
import logging
from typing import AsyncIterator, List, Optional
from urllib.parse import quote

import httpx

from .base import BaseProvider, iter_sse_data
from .errors import ProviderStreamError

logger = logging.getLogger(__name__)


class GeminiProvider(BaseProvider):
    """Google Gemini Provider (streamGenerateContent, SSE)"""

    provider_id = "google"
    label = "Google"

    def __init__(self, endpoint: Optional[str] = None):
        super().__init__((endpoint or "https://generativelanguage.googleapis.com/v1beta/models").rstrip("/"))

    def build_contents(self, messages: List[dict]) -> dict:
        contents = []
        system_parts = []

        for msg in messages:
            if msg["role"] == "system":
                system_parts.append({"text": msg["content"]})
                continue
            contents.append({
                "role": "user" if msg["role"] == "user" else "model",
                "parts": [{"text": msg["content"]}]
            })

        body = {"contents": contents}
        if system_parts:
            body["systemInstruction"] = {"parts": system_parts}
        return body

    def build_request(self, client: httpx.AsyncClient, model: str, messages: List[dict], api_key: str) -> httpx.Request:
        return client.build_request(
            "POST",
            f"{self.endpoint}/{quote(model, safe='')}:streamGenerateContent",
            params={"alt": "sse"},
            headers={
                "x-goog-api-key": api_key,
                "Content-Type": "application/json"
            },
            json=self.build_contents(messages)
        )

    async def iter_text(self, response: httpx.Response) -> AsyncIterator[str]:
        async for data in iter_sse_data(response.aiter_lines()):
            try:
                chunk = json.loads(data)
            except ValueError:
                logger.debug("google: 跳过无法解析的数据行: %r", data[:200])
                continue
            if not isinstance(chunk, dict):
                continue

            error = chunk.get("error")
            if error:
                message = error.get("message") if isinstance(error, dict) else str(error)
                raise ProviderStreamError(f"Google stream error: {message or 'unknown error'}")

            candidates = chunk.get("candidates")
            if not isinstance(candidates, list):
                candidates = []
            feedback = chunk.get("promptFeedback")
            block_reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
            if block_reason and not candidates:
                raise ProviderStreamError(f"Google blocked the prompt: {block_reason}")

            # candidates[].content.parts[].text，形状不符的条目直接跳过
            for cand in candidates:
                content = cand.get("content") if isinstance(cand, dict) else None
                parts = content.get("parts") if isinstance(content, dict) else None
                if not isinstance(parts, list):
                    continue
                for part in parts:
                    text = part.get("text") if isinstance(part, dict) else None
                    if isinstance(text, str) and text:
                        yield text
