"""Format detection and conversion between plain text, Markdown, HTML and RTF."""

from .config import AppConfig, load_config
from .core import ConversionService, convert, detect_format, to_rich_text
from .detection import DetectionResult, FormatKind
from .errors import ConversionError, InvalidInputType, UnsupportedFormatError
from .models import ConversionResult, DocumentProperties

__all__ = [
    "AppConfig",
    "ConversionError",
    "ConversionResult",
    "ConversionService",
    "DetectionResult",
    "DocumentProperties",
    "FormatKind",
    "InvalidInputType",
    "UnsupportedFormatError",
    "convert",
    "detect_format",
    "load_config",
    "to_rich_text",
]
