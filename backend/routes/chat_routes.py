import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, StreamingResponse
from pydantic import ValidationError

from services.chat_service import open_chat_stream
from models.chat import ChatRequest
from models.provider_registry import PROVIDER_CONFIG
from providers.errors import ChatRelayError, UpstreamHTTPError
from utils.middleware import (
    LoggingMiddleware,
    ErrorCaptureMiddleware,
    TimeoutMiddleware,
)
from config import settings

logger = logging.getLogger(__name__)

router = APIRouter()
# 上游 httpx transport，测试中注入 MockTransport；None 表示走真实网络
router.transport = None


def build_chat_middlewares():
    middlewares = []
    if settings.enable_chat_logging:
        middlewares.append(LoggingMiddleware())
    middlewares.append(ErrorCaptureMiddleware(log_path=settings.error_log_path))
    middlewares.append(TimeoutMiddleware(timeout=settings.chat_timeout))
    return middlewares


def _error_response(err: ChatRelayError) -> PlainTextResponse:
    message = err.message
    if isinstance(err, UpstreamHTTPError) and not message.strip():
        label = PROVIDER_CONFIG.get(err.provider, {}).get("name", err.provider)
        message = f"{label} API error"
    return PlainTextResponse(message or "Server error", status_code=err.status_code)


@router.post("/api/chat")
async def chat(request: Request):
    """转发对话并以纯文本字节流返回模型回复"""
    try:
        body = await request.json()
        chat_request = ChatRequest.model_validate(body)
    except (ValueError, ValidationError):
        return PlainTextResponse("Invalid request body", status_code=400)

    try:
        stream = await open_chat_stream(
            chat_request,
            settings=settings,
            middlewares=build_chat_middlewares(),
            transport=router.transport,
        )
    except ChatRelayError as e:
        logger.warning("chat relay rejected: provider=%s status=%s %s", chat_request.provider, e.status_code, e.message[:200])
        return _error_response(e)
    except Exception as e:
        logger.exception("chat relay failed before streaming")
        return PlainTextResponse(str(e) or "Server error", status_code=500)

    return StreamingResponse(
        stream,
        media_type="text/plain; charset=utf-8",
        headers={
            "Cache-Control": "no-cache",
            "X-Chat-Provider": stream.provider_id,
        },
    )
