from __future__ import annotations

from fastapi import APIRouter, Depends

from ...config import AppConfig
from ..dependencies import get_config

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check")
def health(config: AppConfig = Depends(get_config)) -> dict[str, str]:
    return {"status": "ok", "backend": config.external.backend}


__all__ = ["router"]
