"""Request-scoped access to the engine objects stored on ``app.state``."""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request

from ..config import AppConfig
from ..core import ConversionService


def _from_state(request: Request, attribute: str) -> Any:
    value = getattr(request.app.state, attribute, None)
    if value is None:
        raise HTTPException(status_code=503, detail=f"{attribute.upper()}_UNAVAILABLE")
    return value


def get_config(request: Request) -> AppConfig:
    return _from_state(request, "config")


def get_service(request: Request) -> ConversionService:
    return _from_state(request, "service")


__all__ = ["get_config", "get_service"]
