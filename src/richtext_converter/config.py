from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from .constants import DEFAULT_CONFIG_PATH
from .detection import DEFAULT_MIN_CONFIDENCE
from .models import DEFAULT_STYLE_MAP, DocumentProperties, StylePair
from .settings import Settings, _parse_bool


EXTERNAL_BACKENDS = ("regex", "pandoc", "markitdown")


@dataclass(slots=True)
class DocumentConfig:
    font_family: str = "Segoe UI"
    font_size: int = 11
    font_color: tuple[int, int, int] = (0, 0, 0)
    charset: int = 0
    language: int = 1033
    paragraph_spacing: int = 200
    line_height: int = 276
    margin: int = 720
    legacy_underline: bool = False
    style_map: dict[str, StylePair] = field(default_factory=dict)


@dataclass(slots=True)
class DetectionConfig:
    min_confidence: float = DEFAULT_MIN_CONFIDENCE


@dataclass(slots=True)
class ExternalConfig:
    backend: str = "regex"


@dataclass(slots=True)
class RuntimeConfig:
    log_file: Path | None = None
    enable_local_api: bool = False


@dataclass(slots=True)
class APIConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(slots=True)
class AppConfig:
    document: DocumentConfig = field(default_factory=DocumentConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    external: ExternalConfig = field(default_factory=ExternalConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    api: APIConfig = field(default_factory=APIConfig)

    def document_properties(self) -> DocumentProperties:
        doc = self.document
        return DocumentProperties(
            font_family=doc.font_family,
            font_size=doc.font_size,
            font_color=doc.font_color,
            charset=doc.charset,
            language=doc.language,
            paragraph_spacing=doc.paragraph_spacing,
            line_height=doc.line_height,
            margin=doc.margin,
            style_map=doc.style_map,
            legacy_underline=doc.legacy_underline,
        )


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _section(raw: Mapping[str, object], name: str) -> Mapping[str, object] | None:
    data = raw.get(name)
    return data if isinstance(data, Mapping) else None


def _integer(data: Mapping[str, object], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be a whole number, got {value!r}")
    return value


def _flag(data: Mapping[str, object], key: str, default: bool = False) -> bool:
    value = data.get(key, default)
    if isinstance(value, bool):
        return value
    parsed = _parse_bool(value) if isinstance(value, str) else None
    if parsed is None:
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return parsed


def _build_style_map(data: object) -> dict[str, StylePair]:
    if not isinstance(data, Mapping):
        return {}
    styles: dict[str, StylePair] = {}
    for name, pair in data.items():
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise ValueError(f"Style {name!r} must be an [opener, closer] pair")
        styles[str(name)] = (str(pair[0]), str(pair[1]))
    return styles


def _build_document(data: Mapping[str, object] | None) -> DocumentConfig:
    if not data:
        return DocumentConfig()
    color = data.get("font_color", (0, 0, 0))
    if not isinstance(color, (list, tuple)) or len(color) != 3:
        raise ValueError(f"font_color must be an RGB triple, got {color!r}")
    return DocumentConfig(
        font_family=str(data.get("font_family", "Segoe UI")),
        font_size=_integer(data, "font_size", 11),
        font_color=(int(color[0]), int(color[1]), int(color[2])),
        charset=_integer(data, "charset", 0),
        language=_integer(data, "language", 1033),
        paragraph_spacing=_integer(data, "paragraph_spacing", 200),
        line_height=_integer(data, "line_height", 276),
        margin=_integer(data, "margin", 720),
        legacy_underline=_flag(data, "legacy_underline"),
        style_map=_build_style_map(data.get("style_map")),
    )


def _build_detection(data: Mapping[str, object] | None) -> DetectionConfig:
    if not data:
        return DetectionConfig()
    return DetectionConfig(min_confidence=float(data.get("min_confidence", DEFAULT_MIN_CONFIDENCE)))


def _build_external(data: Mapping[str, object] | None) -> ExternalConfig:
    if not data:
        return ExternalConfig()
    backend = str(data.get("backend", "regex")).strip().lower()
    if backend not in EXTERNAL_BACKENDS:
        raise ValueError(f"Unknown external backend {backend!r}; expected one of {', '.join(EXTERNAL_BACKENDS)}")
    return ExternalConfig(backend=backend)


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    log_file = data.get("log_file")
    return RuntimeConfig(
        log_file=Path(str(log_file)) if log_file else None,
        enable_local_api=_flag(data, "enable_local_api"),
    )


def _build_api(data: Mapping[str, object] | None) -> APIConfig:
    if not data:
        return APIConfig()
    return APIConfig(host=str(data.get("host", "127.0.0.1")), port=_integer(data, "port", 8000))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or DEFAULT_CONFIG_PATH
    raw = _read_toml(path)
    return AppConfig(
        document=_build_document(_section(raw, "document")),
        detection=_build_detection(_section(raw, "detection")),
        external=_build_external(_section(raw, "external")),
        runtime=_build_runtime(_section(raw, "runtime")),
        api=_build_api(_section(raw, "api")),
    )


def apply_settings(config: AppConfig, settings: Settings) -> AppConfig:
    """Layer environment overrides on top of a loaded configuration."""

    if settings.enable_local_api is not None:
        config.runtime.enable_local_api = settings.enable_local_api
    if settings.external_backend is not None:
        if settings.external_backend not in EXTERNAL_BACKENDS:
            raise ValueError(f"Unknown external backend {settings.external_backend!r}")
        config.external.backend = settings.external_backend
    return config


def dump_config(config: AppConfig) -> str:
    styles = dict(DEFAULT_STYLE_MAP)
    styles.update(config.document.style_map)
    payload = {
        "document": {
            "font_family": config.document.font_family,
            "font_size": config.document.font_size,
            "font_color": list(config.document.font_color),
            "charset": config.document.charset,
            "language": config.document.language,
            "paragraph_spacing": config.document.paragraph_spacing,
            "line_height": config.document.line_height,
            "margin": config.document.margin,
            "legacy_underline": config.document.legacy_underline,
            "style_map": {name: list(pair) for name, pair in styles.items()},
        },
        "detection": {
            "min_confidence": config.detection.min_confidence,
        },
        "external": {
            "backend": config.external.backend,
        },
        "runtime": {
            "log_file": str(config.runtime.log_file) if config.runtime.log_file else None,
            "enable_local_api": config.runtime.enable_local_api,
        },
        "api": {
            "host": config.api.host,
            "port": config.api.port,
        },
    }
    return json.dumps(payload, indent=2)


__all__ = [
    "APIConfig",
    "AppConfig",
    "DetectionConfig",
    "DocumentConfig",
    "EXTERNAL_BACKENDS",
    "ExternalConfig",
    "RuntimeConfig",
    "apply_settings",
    "dump_config",
    "load_config",
]
