from typing import List, Optional
import json as _json
import logging

import httpx

from config import AppSettings, settings as default_settings
from models.api_key_selector import resolve_api_key
from models.chat import ChatRequest
from models.provider_registry import PROVIDER_CONFIG
from providers.base import BaseProvider
from providers.errors import ChatRelayError, UpstreamHTTPError
from providers.factory import ProviderFactory
from utils.middleware import (
    BaseMiddleware,
    apply_middlewares_before,
    apply_middlewares_after,
)

logger = logging.getLogger(__name__)


def extract_api_error_message(body: str, status_code: int) -> str:
    """从上游错误响应体中提取可读的错误信息（用于日志）

    兼容 OpenAI / Groq / Mistral：{"error": {"code", "message"}}，
    Anthropic：{"type": "error", "error": {"type", "message"}}，
    Gemini：{"error": {"code", "message", "status"}}。
    """
    try:
        parsed = _json.loads(body) if body else {}
    except ValueError:
        parsed = None
    error_obj = parsed.get("error") if isinstance(parsed, dict) else None
    if isinstance(error_obj, dict):
        msg = error_obj.get("message") or ""
        code = error_obj.get("code") or error_obj.get("type") or error_obj.get("status") or ""
        label = f" ({code})" if code else ""
        if msg:
            return f"HTTP {status_code}{label}: {msg}"
        if code:
            return f"HTTP {status_code}{label}"
    elif isinstance(error_obj, str):
        return f"HTTP {status_code}: {error_obj}"
    if status_code == 429:
        return "HTTP 429: rate limited by provider"
    if status_code in (401, 403):
        return f"HTTP {status_code}: authentication failed, check the API key"
    return f"HTTP {status_code}"


class ChatStream:
    """上游流式响应的归一化视图：按顺序产出 UTF-8 字节增量

    迭代结束、出错、被取消或调用 aclose() 时立即释放上游连接；
    结束时把摘要交给中间件的 after_response（只执行一次）。
    """

    def __init__(
        self,
        provider: BaseProvider,
        model: str,
        response: httpx.Response,
        client: httpx.AsyncClient,
        middlewares: Optional[List[BaseMiddleware]] = None,
    ):
        self.provider = provider
        self.model = model
        self.response = response
        self.client = client
        self.middlewares = middlewares or []
        self._texts = None
        self._chars = 0
        self._closed = False

    @property
    def provider_id(self) -> str:
        return self.provider.provider_id

    def __aiter__(self) -> "ChatStream":
        return self

    async def __anext__(self) -> bytes:
        if self._closed:
            raise StopAsyncIteration
        if self._texts is None:
            self._texts = self.provider.iter_text(self.response)
        try:
            text = await self._texts.__anext__()
        except StopAsyncIteration:
            await self._finish()
            raise
        except Exception as e:
            error = str(e) or e.__class__.__name__
            logger.error("provider=%s model=%s 流中断: %s", self.provider_id, self.model, error)
            await self._finish(error)
            raise
        except BaseException:
            # 调用方断开（CancelledError 等）
            await self._finish("stream cancelled")
            raise
        self._chars += len(text)
        return text.encode("utf-8")

    async def aclose(self) -> None:
        await self._finish("stream closed before completion")

    async def _finish(self, error: Optional[str] = None) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self._texts is not None:
                await self._texts.aclose()
        finally:
            try:
                await self.response.aclose()
            finally:
                await self.client.aclose()
        summary = {"provider": self.provider_id, "model": self.model, "chars": self._chars}
        if error:
            summary["error"] = error
        await apply_middlewares_after(summary, self.middlewares)


async def open_chat_stream(
    chat: ChatRequest,
    settings: Optional[AppSettings] = None,
    middlewares: Optional[List[BaseMiddleware]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ChatStream:
    """把统一请求转发给对应 provider，返回已建立的流

    上游只调用一次：不重试、不缓存。首个响应非 2xx 时抛出 UpstreamHTTPError，
    状态码与响应体原样交给调用方。
    """
    settings = settings or default_settings
    middlewares = middlewares or []

    pid = ProviderFactory.normalize(chat.provider)
    provider = ProviderFactory.create(
        pid,
        endpoint=settings.endpoint_for(pid),
        anthropic_max_tokens=settings.anthropic_max_tokens,
        anthropic_version=settings.anthropic_version,
    )
    api_key = resolve_api_key(settings, PROVIDER_CONFIG[pid]["env_key"])

    payload = {
        "provider": pid,
        "model": chat.model,
        "messages": chat.message_dicts(),
    }
    payload = await apply_middlewares_before(payload, middlewares)
    timeout = payload.get("_timeout") or settings.chat_timeout

    client = httpx.AsyncClient(timeout=timeout, transport=transport)
    try:
        request = provider.build_request(client, payload["model"], payload["messages"], api_key)
        response = await client.send(request, stream=True)
    except httpx.HTTPError as e:
        await client.aclose()
        message = f"{provider.label} request failed: {str(e) or e.__class__.__name__}"
        await apply_middlewares_after({"provider": pid, "model": payload["model"], "chars": 0, "error": message}, middlewares)
        raise ChatRelayError(message) from e
    except BaseException:
        # 取消或构造请求失败时同样释放连接池
        await client.aclose()
        raise

    if not response.is_success:
        try:
            body = (await response.aread()).decode("utf-8", errors="replace")
        finally:
            await response.aclose()
            await client.aclose()
        detail = extract_api_error_message(body, response.status_code)
        await apply_middlewares_after({"provider": pid, "model": payload["model"], "chars": 0, "error": detail}, middlewares)
        raise UpstreamHTTPError(pid, response.status_code, body)

    return ChatStream(provider, payload["model"], response, client, middlewares)
