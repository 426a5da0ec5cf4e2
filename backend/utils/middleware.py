from abc import ABC, abstractmethod
from typing import Any, Dict, List
import logging
import os
import time
from datetime import datetime

logger = logging.getLogger(__name__)


class BaseMiddleware(ABC):
    """中间件基类，在上游调用前后对 payload / 结果摘要做处理

    payload: {"provider", "model", "messages"}，下划线开头的键为中间件之间的标记
    summary: {"provider", "model", "chars", "error"?}
    """

    @abstractmethod
    async def before_request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return payload

    @abstractmethod
    async def after_response(self, summary: Dict[str, Any]) -> Dict[str, Any]:
        return summary


class LoggingMiddleware(BaseMiddleware):
    """请求日志与耗时"""

    def __init__(self):
        self._started = None

    async def before_request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._started = time.monotonic()
        logger.info(
            "-> provider=%s model=%s messages=%d",
            payload.get("provider"), payload.get("model"), len(payload.get("messages") or []),
        )
        return payload

    async def after_response(self, summary: Dict[str, Any]) -> Dict[str, Any]:
        elapsed = time.monotonic() - self._started if self._started is not None else 0.0
        summary["elapsed"] = elapsed
        if summary.get("error"):
            logger.warning(
                "<- provider=%s model=%s failed after %.2fs: %s",
                summary.get("provider"), summary.get("model"), elapsed, summary["error"],
            )
        else:
            logger.info(
                "<- provider=%s model=%s streamed %d chars in %.2fs",
                summary.get("provider"), summary.get("model"), summary.get("chars", 0), elapsed,
            )
        return summary


class ErrorCaptureMiddleware(BaseMiddleware):
    """把失败记录追加到错误日志文件"""

    def __init__(self, log_path: str = "logs/errors.log"):
        self.log_path = log_path

    async def before_request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return payload

    async def after_response(self, summary: Dict[str, Any]) -> Dict[str, Any]:
        if summary.get("error"):
            try:
                dir_path = os.path.dirname(self.log_path)
                if dir_path:
                    os.makedirs(dir_path, exist_ok=True)
                with open(self.log_path, "a", encoding="utf-8") as f:
                    f.write(
                        f"{datetime.now().isoformat()} | {summary.get('provider')} | "
                        f"{summary.get('model')} | {summary['error']}\n"
                    )
            except OSError as e:
                # 写文件失败不影响主流程
                logger.warning("无法写入错误日志 %s: %s", self.log_path, e)
        return summary


class TimeoutMiddleware(BaseMiddleware):
    """在 payload 上标记超时，由 httpx 客户端实际执行"""

    def __init__(self, timeout: float):
        self.timeout = timeout

    async def before_request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        payload["_timeout"] = self.timeout
        return payload

    async def after_response(self, summary: Dict[str, Any]) -> Dict[str, Any]:
        return summary


async def apply_middlewares_before(payload: Dict[str, Any], middlewares: List[BaseMiddleware]) -> Dict[str, Any]:
    for mw in middlewares or []:
        payload = await mw.before_request(payload)
    return payload


async def apply_middlewares_after(summary: Dict[str, Any], middlewares: List[BaseMiddleware]) -> Dict[str, Any]:
    for mw in middlewares or []:
        summary = await mw.after_response(summary)
    return summary
