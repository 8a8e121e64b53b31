"""Domain models for rich-text conversion services."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from .detection import FormatKind

StylePair = tuple[str, str]

DEFAULT_STYLE_MAP: Mapping[str, StylePair] = MappingProxyType(
    {
        "bold": ("\\b ", "\\b0 "),
        "italic": ("\\i ", "\\i0 "),
        "underline": ("\\ul ", "\\ulnone "),
        "strike": ("\\strike ", "\\strike0 "),
        "code": ("{\\f0\\highlight0 ", "}"),
        "left": ("\\ql ", ""),
        "center": ("\\qc ", ""),
        "right": ("\\qr ", ""),
        "justify": ("\\qj ", ""),
    }
)


def _default_style_map() -> Mapping[str, StylePair]:
    return MappingProxyType(dict(DEFAULT_STYLE_MAP))


@dataclass(frozen=True, slots=True)
class DocumentProperties:
    """Read-only typography settings threaded through every conversion call."""

    font_family: str = "Segoe UI"
    font_size: int = 11
    font_color: tuple[int, int, int] = (0, 0, 0)
    charset: int = 0
    language: int = 1033
    paragraph_spacing: int = 200
    line_height: int = 276
    margin: int = 720
    style_map: Mapping[str, StylePair] = field(default_factory=_default_style_map)
    legacy_underline: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.font_size, bool) or not isinstance(self.font_size, int):
            raise TypeError(f"font_size must be an integer point size, got {self.font_size!r}")
        if self.font_size <= 0:
            raise ValueError(f"font_size must be positive, got {self.font_size}")
        if len(self.font_color) != 3 or any(not 0 <= channel <= 255 for channel in self.font_color):
            raise ValueError(f"font_color must be an RGB triple, got {self.font_color!r}")
        if not isinstance(self.style_map, MappingProxyType):
            merged = dict(DEFAULT_STYLE_MAP)
            merged.update(self.style_map)
            object.__setattr__(self, "style_map", MappingProxyType(merged))

    @property
    def half_points(self) -> int:
        return self.font_size * 2

    def style(self, name: str) -> StylePair:
        return self.style_map.get(name, ("", ""))


class ListKind(str, Enum):
    BULLET = "bullet"
    ORDERED = "ordered"

    @property
    def template_id(self) -> int:
        return 1 if self is ListKind.BULLET else 2


@dataclass(slots=True)
class ListContext:
    """State of the list run currently being emitted."""

    kind: ListKind
    level: int = 0
    list_id: int = 1
    active: bool = True


@dataclass(slots=True)
class ConversionResult:
    """Result of a single in-memory conversion."""

    text: str
    source_format: FormatKind
    target_format: FormatKind
    validated: bool = False
    soft_failure: bool = False
    warnings: list[str] = field(default_factory=list)


__all__ = [
    "DEFAULT_STYLE_MAP",
    "ConversionResult",
    "DocumentProperties",
    "ListContext",
    "ListKind",
    "StylePair",
]
