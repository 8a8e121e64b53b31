from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI

from ..config import AppConfig, apply_settings, load_config
from ..core import ConversionService
from ..settings import Settings, get_settings
from .routers import convert, health


def create_app(config: AppConfig | None = None, *, require_enabled: bool = True) -> FastAPI:
    settings = get_settings()
    config = config or _prepare_config(settings, settings.config_path)
    if require_enabled and not config.runtime.enable_local_api:
        raise RuntimeError("Local API is disabled. Enable it via configuration or environment.")

    app = FastAPI(title="Rich Text Converter", version="0.1.0")
    app.state.config = config
    app.state.service = ConversionService(config)

    app.include_router(health.router)
    app.include_router(convert.router)
    return app


def _prepare_config(settings: Settings, path: Path) -> AppConfig:
    return apply_settings(load_config(path), settings)


__all__ = ["create_app"]
