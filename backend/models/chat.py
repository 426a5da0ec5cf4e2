from typing import List, Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """统一请求体：{provider, model, messages}"""

    provider: str = Field(min_length=1)
    model: str = Field(min_length=1)
    messages: List[ChatMessage]

    def message_dicts(self) -> List[dict]:
        return [m.model_dump() for m in self.messages]
