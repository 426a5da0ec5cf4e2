from abc import ABC, abstractmethod
from typing import AsyncIterator, List

import httpx


class BaseProvider(ABC):
    """统一的Provider接口

    build_request 把统一请求翻译成上游的请求格式，
    iter_text 把上游的流式响应归一化为纯文本增量。
    """

    provider_id: str = ""
    label: str = ""

    def __init__(self, endpoint: str):
        self.endpoint = endpoint

    @abstractmethod
    def build_request(self, client: httpx.AsyncClient, model: str, messages: List[dict], api_key: str) -> httpx.Request:
        raise NotImplementedError

    @abstractmethod
    def iter_text(self, response: httpx.Response) -> AsyncIterator[str]:
        raise NotImplementedError


async def iter_sse_data(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """从 SSE 文本行中提取每个事件的 data 负载

    同一事件的多行 data 以换行拼接；注释行与 event/id/retry 字段忽略。
    流结束时即使缺少空行，也会输出最后一个事件。
    """
    data_lines: List[str] = []
    async for line in lines:
        line = line.rstrip("\r\n")
        if not line:
            if data_lines:
                yield "\n".join(data_lines)
                data_lines = []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if field != "data":
            continue
        if value.startswith(" "):
            value = value[1:]
        data_lines.append(value)
    if data_lines:
        yield "\n".join(data_lines)
