# routers/health.py
from datetime import datetime, timezone

from fastapi import APIRouter

from inspection.llm_client import is_configured

router = APIRouter()


@router.get("/api/health", summary="ヘルスチェック", tags=["health"])
def health():
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "openai_configured": is_configured(),
    }
