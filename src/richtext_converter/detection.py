from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .validation import RTF_MARKER, validate


class FormatKind(str, Enum):
    RTF = "rtf"
    HTML = "html"
    MARKDOWN = "markdown"
    JSON = "json"
    CSV = "csv"
    TSV = "tsv"
    XML = "xml"
    PLAIN = "plain"

    @property
    def delimiter(self) -> str | None:
        if self is FormatKind.CSV:
            return ","
        if self is FormatKind.TSV:
            return "\t"
        return None

    @property
    def is_tabular(self) -> bool:
        return self.delimiter is not None

    @classmethod
    def parse(cls, value: FormatKind | str) -> FormatKind:
        if isinstance(value, FormatKind):
            return value
        if not isinstance(value, str):
            raise DetectionError(f"Unsupported format: {value!r}")
        normalized = value.strip().lower().replace("-", "").replace("_", "")
        kind = ALIASES.get(normalized)
        if kind is None:
            raise DetectionError(f"Unsupported format: {value or '<none>'}")
        return kind


ALIASES: dict[str, FormatKind] = {
    **{kind.value: kind for kind in FormatKind},
    "richcontrolword": FormatKind.RTF,
    "richtext": FormatKind.RTF,
    "markuptree": FormatKind.HTML,
    "htm": FormatKind.HTML,
    "lightweightmarkup": FormatKind.MARKDOWN,
    "md": FormatKind.MARKDOWN,
    "objectnotation": FormatKind.JSON,
    "tabular": FormatKind.CSV,
    "genericmarkup": FormatKind.XML,
    "plaintext": FormatKind.PLAIN,
    "text": FormatKind.PLAIN,
    "txt": FormatKind.PLAIN,
}

HINT_MAP: dict[str, FormatKind] = {
    "text/rtf": FormatKind.RTF,
    "application/rtf": FormatKind.RTF,
    "text/html": FormatKind.HTML,
    "text/markdown": FormatKind.MARKDOWN,
    "application/json": FormatKind.JSON,
    "text/csv": FormatKind.CSV,
    "text/tab-separated-values": FormatKind.TSV,
    "application/xml": FormatKind.XML,
    "text/xml": FormatKind.XML,
    "text/plain": FormatKind.PLAIN,
}

DEFAULT_MIN_CONFIDENCE = 0.5


@dataclass(slots=True)
class DetectionResult:
    kind: FormatKind
    confidence: float


class DetectionError(ValueError):
    """Raised when a format name cannot be resolved."""


HTML_DOCUMENT_RE = re.compile(r"<!doctype\s+html|<html[\s>]|<body[\s>]", re.IGNORECASE)
HTML_BLOCK_RE = re.compile(r"<(?:div|span|p|h[1-6]|table|ul|ol)(?:\s[^>]*)?/?>", re.IGNORECASE)
JSON_OPEN_RE = re.compile(r"^(?:\{\s*(?:\"|\})|\[)")
XML_DECL_RE = re.compile(r"^<\?xml\s", re.IGNORECASE)
XML_PAIR_RE = re.compile(r"<([A-Za-z_][\w:.-]*)(?:\s[^>]*)?>.*?</\1\s*>", re.DOTALL)
HTML_BLOCK_TAGS = frozenset(
    {"html", "body", "head", "div", "span", "p", "h1", "h2", "h3", "h4", "h5", "h6", "table", "ul", "ol", "li"}
)

MARKDOWN_PATTERNS: dict[str, re.Pattern[str]] = {
    "header": re.compile(r"^#{1,6}\s+\S", re.MULTILINE),
    "bullet": re.compile(r"^\s*[-*+]\s+\S", re.MULTILINE),
    "ordered": re.compile(r"^\s*\d+\.\s+\S", re.MULTILINE),
    "bold": re.compile(r"\*\*[^*\n]+\*\*|__[^_\n]+__"),
    "italic": re.compile(r"(?<![*\w])\*(?![*\s])[^*\n]+(?<![*\s])\*(?![*\w])"),
    "strike": re.compile(r"~~[^~\n]+~~"),
    "code": re.compile(r"`[^`\n]+`"),
    "fence": re.compile(r"^```", re.MULTILINE),
    "link": re.compile(r"(?<!!)\[[^\]\n]+\]\([^)\s]+\)"),
    "image": re.compile(r"!\[[^\]\n]*\]\([^)\s]+\)"),
    "blockquote": re.compile(r"^>\s", re.MULTILINE),
}
MARKDOWN_MIN_SCORE = 2


def _score_rtf(text: str) -> float:
    if not text.startswith(RTF_MARKER):
        return 0.0
    verdict = validate(text)
    if not verdict.is_valid:
        return 0.0
    return min(1.0, verdict.confidence / 4)


def _score_html(text: str) -> float:
    if HTML_DOCUMENT_RE.search(text):
        return 0.95
    if HTML_BLOCK_RE.search(text):
        return 0.7
    return 0.0


def _score_json(text: str) -> float:
    if JSON_OPEN_RE.match(text) is None:
        return 0.0
    closer = "}" if text[0] == "{" else "]"
    return 0.8 if text.endswith(closer) else 0.0


def _tabular_counts(text: str) -> tuple[FormatKind, float]:
    lines = text.split("\n")
    if len(lines) < 2:
        return FormatKind.CSV, 0.0
    first, second = lines[0], lines[1]
    commas = (first.count(","), second.count(","))
    tabs = (first.count("\t"), second.count("\t"))
    if commas[0] == commas[1] and commas[0] > 0 and commas[0] >= tabs[0]:
        return FormatKind.CSV, 0.7
    if tabs[0] == tabs[1] and tabs[0] > 0 and tabs[0] >= commas[0]:
        return FormatKind.TSV, 0.7
    return FormatKind.CSV, 0.0


def markdown_score(text: str) -> int:
    return sum(len(pattern.findall(text)) for pattern in MARKDOWN_PATTERNS.values())


def _score_markdown(text: str) -> float:
    score = markdown_score(text)
    if score >= MARKDOWN_MIN_SCORE:
        return min(1.0, score / 4)
    lines = text.split("\n")
    if len(lines) <= 3 and MARKDOWN_PATTERNS["header"].search(text):
        return 0.5
    return 0.0


def _score_xml(text: str) -> float:
    if XML_DECL_RE.match(text):
        return 0.9
    for match in XML_PAIR_RE.finditer(text):
        if match.group(1).lower() not in HTML_BLOCK_TAGS:
            return 0.6
    return 0.0


def _fixed(kind: FormatKind, scorer: Callable[[str], float]) -> Callable[[str], tuple[FormatKind, float]]:
    return lambda text: (kind, scorer(text))


_BRANCHES: tuple[Callable[[str], tuple[FormatKind, float]], ...] = (
    _fixed(FormatKind.RTF, _score_rtf),
    _fixed(FormatKind.HTML, _score_html),
    _fixed(FormatKind.JSON, _score_json),
    _tabular_counts,
    _fixed(FormatKind.MARKDOWN, _score_markdown),
    _fixed(FormatKind.XML, _score_xml),
)


def _normalize(content: str) -> str:
    return content.replace("\r\n", "\n").replace("\r", "\n").strip()


def _confirm_hint(text: str, hint: str | None) -> DetectionResult | None:
    if not hint:
        return None
    kind = HINT_MAP.get(hint.split(";", 1)[0].strip().lower())
    if kind is None:
        return None
    if kind is FormatKind.PLAIN:
        return DetectionResult(kind=kind, confidence=1.0)
    for branch in _BRANCHES:
        candidate, confidence = branch(text)
        if candidate is kind and confidence > 0:
            return DetectionResult(kind=kind, confidence=confidence)
    return None


def detect_format(
    content: str | None,
    *,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    hint: str | None = None,
) -> DetectionResult:
    """Classify raw text. Heuristic only; never raises."""

    if not isinstance(content, str):
        return DetectionResult(kind=FormatKind.PLAIN, confidence=0.0)
    text = _normalize(content)
    if not text:
        return DetectionResult(kind=FormatKind.PLAIN, confidence=0.0)
    hinted = _confirm_hint(text, hint)
    if hinted is not None:
        return hinted
    for branch in _BRANCHES:
        kind, confidence = branch(text)
        if confidence > 0 and confidence >= min_confidence:
            return DetectionResult(kind=kind, confidence=confidence)
    return DetectionResult(kind=FormatKind.PLAIN, confidence=1.0)


def detect(content: str | None, *, min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> FormatKind:
    return detect_format(content, min_confidence=min_confidence).kind


__all__ = [
    "DEFAULT_MIN_CONFIDENCE",
    "DetectionError",
    "DetectionResult",
    "FormatKind",
    "MARKDOWN_PATTERNS",
    "detect",
    "detect_format",
    "markdown_score",
]
