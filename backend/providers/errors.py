class ChatRelayError(Exception):
    """中继链路上的错误，携带应返回给调用方的 HTTP 状态码"""

    status_code = 500

    def __init__(self, message: str = "", status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class UnsupportedProviderError(ChatRelayError):
    status_code = 400

    def __init__(self, provider_id: str):
        super().__init__("Unsupported provider")
        self.provider_id = provider_id


class MissingCredentialError(ChatRelayError):
    def __init__(self, env_name: str):
        super().__init__(f"Missing required env: {env_name}")
        self.env_name = env_name


class UpstreamHTTPError(ChatRelayError):
    """上游对首个请求返回了非 2xx 状态，状态码与响应体原样转交"""

    def __init__(self, provider: str, status_code: int, body: str = ""):
        super().__init__(body, status_code=status_code)
        self.provider = provider
        self.body = body


class ProviderStreamError(ChatRelayError):
    """上游在流内部报告了错误（error 事件 / error 字段）"""
