"""凭证解析：环境变量中的 API Key 池

凭证变量可以是单个 Key，也可以是逗号分隔的多 Key 池，每次请求随机选一个。
"""
import random
from typing import List, Optional

from providers.errors import MissingCredentialError


def parse_api_key_pool(api_key_string: Optional[str]) -> List[str]:
    """将逗号分隔的 Key 字符串解析为有效 Key 列表（去空白、去空项）"""
    if not api_key_string:
        return []
    return [k.strip() for k in api_key_string.split(",") if k.strip()]


def select_api_key(api_key_string: Optional[str]) -> Optional[str]:
    keys = parse_api_key_pool(api_key_string)
    if not keys:
        return None
    if len(keys) == 1:
        return keys[0]
    return random.choice(keys)


def resolve_api_key(settings, env_name: str) -> str:
    """从配置中取出 provider 的凭证

    Args:
        settings: AppSettings 实例
        env_name: 凭证环境变量名，如 OPENAI_API_KEY

    Raises:
        MissingCredentialError: 变量未设置或只包含空白/逗号
    """
    key = select_api_key(settings.api_key_for(env_name))
    if not key:
        raise MissingCredentialError(env_name)
    return key
