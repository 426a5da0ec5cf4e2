from typing import Optional

from .base import BaseProvider
from .openai_provider import OpenAICompatibleProvider
from .anthropic_provider import AnthropicProvider
from .gemini_provider import GeminiProvider
from .errors import UnsupportedProviderError
from .provider_ids import OPENAI_LIKE, ANTHROPIC, GEMINI
from models.provider_registry import PROVIDER_CONFIG


class ProviderFactory:
    """简单的 Provider 工厂"""

    @staticmethod
    def normalize(provider_id: Optional[str]) -> str:
        return (provider_id or "").strip().lower()

    @staticmethod
    def create(
        provider_id: str,
        endpoint: Optional[str] = None,
        anthropic_max_tokens: int = 1024,
        anthropic_version: str = "2023-06-01",
    ) -> BaseProvider:
        pid = ProviderFactory.normalize(provider_id)
        config = PROVIDER_CONFIG.get(pid)
        if config is None:
            raise UnsupportedProviderError(pid)
        endpoint = endpoint or config["endpoint"]
        if pid in OPENAI_LIKE:
            return OpenAICompatibleProvider(endpoint, provider_id=pid, label=config["name"])
        if pid in ANTHROPIC:
            return AnthropicProvider(endpoint, max_tokens=anthropic_max_tokens, api_version=anthropic_version)
        if pid in GEMINI:
            return GeminiProvider(endpoint)
        # 注册表里有但没有对应实现
        raise UnsupportedProviderError(pid)
