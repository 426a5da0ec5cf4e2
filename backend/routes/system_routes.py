from datetime import datetime

from fastapi import APIRouter

from config import settings
from models.api_key_selector import parse_api_key_pool
from models.provider_registry import PROVIDER_CONFIG

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@router.get("/api/providers")
async def list_providers():
    """可用 provider 列表；configured 表示服务端是否已配置凭证"""
    items = []
    for pid, cfg in PROVIDER_CONFIG.items():
        items.append({
            "id": pid,
            "name": cfg["name"],
            "default_model": cfg["default_model"],
            "configured": bool(parse_api_key_pool(settings.api_key_for(cfg["env_key"]))),
        })
    return {"providers": items}
