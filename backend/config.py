from typing import Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """应用配置（Pydantic Settings，可覆盖 env）"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Provider 凭证（逗号分隔可配置多 Key 轮换池）
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    google_generative_ai_api_key: Optional[str] = None
    groq_api_key: Optional[str] = None
    mistral_api_key: Optional[str] = None

    # 上游调用
    chat_timeout: float = Field(default=120.0)
    anthropic_max_tokens: int = Field(default=1024)
    anthropic_version: str = Field(default="2023-06-01")
    # 覆盖默认 endpoint，例如 {"openai": "http://proxy.local/v1/chat/completions"}
    provider_endpoints: Dict[str, str] = Field(default_factory=dict)

    # 中间件控制
    enable_chat_logging: bool = Field(default=True)
    error_log_path: str = Field(default="logs/errors.log")

    log_level: str = Field(default="INFO")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    def api_key_for(self, env_name: str) -> Optional[str]:
        """按环境变量名读取凭证，例如 OPENAI_API_KEY -> openai_api_key"""
        return getattr(self, env_name.lower(), None)

    def endpoint_for(self, provider_id: str) -> Optional[str]:
        return self.provider_endpoints.get(provider_id)


settings = AppSettings()
