"""Conversions the engine does not build natively.

Backends share one call shape, ``convert(source, target, content)``.
``RegexConverter`` is the in-process extractor and the fallback for every
other backend.
"""

from __future__ import annotations

import html
import re
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Dict, Protocol, Type

from .detection import FormatKind
from .errors import UNSUPPORTED_CONVERSION_PAIR, ExternalConversionError
from .markdown import HEADING_SIZES, markdown_to_html, markdown_to_text


class ExternalConverter(Protocol):
    name: str

    def convert(self, source: FormatKind, target: FormatKind, content: str) -> str:  # pragma: no cover - interface
        ...


_ESCAPES = {"\\\\": "\ue000", "\\{": "\ue001", "\\}": "\ue002"}
_RESTORE = {"\ue000": "\\", "\ue001": "{", "\ue002": "}"}
_DESTINATIONS = ("{\\*", "{\\fonttbl", "{\\colortbl", "{\\stylesheet", "{\\info", "{\\pict", "{\\header", "{\\footer")

PNTEXT_RE = re.compile(r"\{\\pntext\s*([^{}]*?)\\tab\s*\}")
HYPERLINK_RE = re.compile(
    r"\{\\field\s*\{\\\*\\fldinst\s*\{?\s*HYPERLINK\s+\"([^\"]*)\"\s*\}?\s*\}"
    r"\s*\{\\fldrslt\s*\{?(?:\\ul\s?)?([^{}]*)\}?\s*\}\s*\}"
)
HEADING_RE = re.compile(r"\{\\b\\fs(\d+) ([^{}]*)\}")
CODE_RE = re.compile(r"\{\\f0\\highlight0 ([^{}]*)\}")
PARAGRAPH_RE = re.compile(r"\\par(?![a-z])\s?")
LIST_PARAGRAPH_RE = re.compile(r"\\ls\d+")
HEX_RE = re.compile(r"\\'([0-9a-fA-F]{2})")
UNICODE_RE = re.compile(r"\\u(-?\d+) ?\??")
CONTROL_WORD_RE = re.compile(r"\\[a-zA-Z]+-?\d* ?")
CONTROL_SYMBOL_RE = re.compile(r"\\[^a-zA-Z\s]")
MARKDOWN_TOGGLES = (
    (re.compile(r"\\b0 ?"), "**"),
    (re.compile(r"\\b(?![a-z0-9]) ?"), "**"),
    (re.compile(r"\\i0 ?"), "*"),
    (re.compile(r"\\i(?![a-z0-9]) ?"), "*"),
    (re.compile(r"\\strike0 ?"), "~~"),
    (re.compile(r"\\strike(?![a-z0-9]) ?"), "~~"),
)

HTML_REPLACEMENTS = (
    (re.compile(r"<br\s*/?>", re.IGNORECASE), "\n"),
    (re.compile(r"</?(?:strong|b)(?:\s[^>]*)?>", re.IGNORECASE), "**"),
    (re.compile(r"</?(?:em|i)(?:\s[^>]*)?>", re.IGNORECASE), "*"),
    (re.compile(r"</?(?:s|strike|del)(?:\s[^>]*)?>", re.IGNORECASE), "~~"),
    (re.compile(r"</?code(?:\s[^>]*)?>", re.IGNORECASE), "`"),
    (re.compile(r"<li(?:\s[^>]*)?>", re.IGNORECASE), "- "),
    (re.compile(r"</(?:p|div|h[1-6]|blockquote|pre|ul|ol)>", re.IGNORECASE), "\n\n"),
    (re.compile(r"</li>", re.IGNORECASE), "\n"),
)
HTML_HEADING_RE = re.compile(r"<h([1-6])(?:\s[^>]*)?>", re.IGNORECASE)
HTML_LINK_RE = re.compile(r"<a\s[^>]*href=\"([^\"]*)\"[^>]*>(.*?)</a>", re.IGNORECASE | re.DOTALL)
HTML_TAG_RE = re.compile(r"<[^>]+>")
BLANK_RUN_RE = re.compile(r"\n{3,}")


def _strip_destinations(text: str) -> str:
    out: list[str] = []
    index = 0
    length = len(text)
    while index < length:
        if text[index] == "{" and text.startswith(_DESTINATIONS, index):
            depth = 0
            while index < length:
                char = text[index]
                if char == "\\":
                    index += 2
                    continue
                if char == "{":
                    depth += 1
                elif char == "}":
                    depth -= 1
                    if depth == 0:
                        index += 1
                        break
                index += 1
            continue
        out.append(text[index])
        index += 1
    return "".join(out)


def _decode_unicode(match: re.Match[str]) -> str:
    code = int(match.group(1))
    if code < 0:
        code += 0x10000
    return chr(code)


def _join_surrogates(text: str) -> str:
    # astral characters arrive as two \uN escapes, one per UTF-16 half
    return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")


def _heading_level(half_points: int) -> int | None:
    points = half_points // 2
    for level, size in enumerate(HEADING_SIZES, start=1):
        if points == size:
            return level
    return None


def rtf_to_markdown(content: str, *, keep_markup: bool = True) -> str:
    """Best-effort extraction of the supported subset from a control-word document."""

    text = content
    for escaped, placeholder in _ESCAPES.items():
        text = text.replace(escaped, placeholder)
    text = text.replace("\r\n", "").replace("\n", "").replace("\r", "")
    text = HYPERLINK_RE.sub(r"[\2](\1)" if keep_markup else r"\2", text)
    text = _strip_destinations(text)

    def list_marker(match: re.Match[str]) -> str:
        digits = re.search(r"\d+", match.group(1))
        return f"{digits.group(0)}. " if digits and "\\" not in match.group(1) else "- "

    def heading(match: re.Match[str]) -> str:
        level = _heading_level(int(match.group(1)))
        if level is None:
            return f"**{match.group(2)}**" if keep_markup else match.group(2)
        return f"{'#' * level} {match.group(2)}" if keep_markup else match.group(2)

    text = PNTEXT_RE.sub(list_marker if keep_markup else "", text)
    text = HEADING_RE.sub(heading, text)
    text = CODE_RE.sub(r"`\1`" if keep_markup else r"\1", text)

    paragraphs: list[tuple[bool, str]] = []
    for chunk in PARAGRAPH_RE.split(text):
        is_list = LIST_PARAGRAPH_RE.search(chunk) is not None
        for pattern, replacement in MARKDOWN_TOGGLES:
            chunk = pattern.sub(replacement if keep_markup else "", chunk)
        chunk = re.sub(r"\\line(?![a-z]) ?", "\n", chunk)
        chunk = re.sub(r"\\tab(?![a-z]) ?", "\t", chunk)
        chunk = HEX_RE.sub(lambda m: bytes([int(m.group(1), 16)]).decode("cp1252", errors="replace"), chunk)
        chunk = _join_surrogates(UNICODE_RE.sub(_decode_unicode, chunk))
        chunk = CONTROL_WORD_RE.sub("", chunk)
        chunk = CONTROL_SYMBOL_RE.sub("", chunk)
        chunk = chunk.replace("{", "").replace("}", "").strip()
        if chunk:
            paragraphs.append((is_list, chunk))

    lines: list[str] = []
    previous_list = False
    for is_list, chunk in paragraphs:
        if lines:
            lines.append("\n" if is_list and previous_list else "\n\n")
        lines.append(chunk)
        previous_list = is_list
    result = "".join(lines)
    for placeholder, literal in _RESTORE.items():
        result = result.replace(placeholder, literal)
    return result


def html_to_markdown(content: str) -> str:
    text = HTML_LINK_RE.sub(lambda m: f"[{HTML_TAG_RE.sub('', m.group(2))}]({m.group(1)})", content)
    text = HTML_HEADING_RE.sub(lambda m: "\n\n" + "#" * int(m.group(1)) + " ", text)
    for pattern, replacement in HTML_REPLACEMENTS:
        text = pattern.sub(replacement, text)
    text = html.unescape(HTML_TAG_RE.sub("", text))
    lines = [line.strip() for line in text.split("\n")]
    return BLANK_RUN_RE.sub("\n\n", "\n".join(lines)).strip()


class RegexConverter:
    name = "regex"

    def convert(self, source: FormatKind, target: FormatKind, content: str) -> str:
        if source is FormatKind.RTF:
            if target is FormatKind.MARKDOWN:
                return rtf_to_markdown(content)
            if target is FormatKind.PLAIN:
                return rtf_to_markdown(content, keep_markup=False)
            if target is FormatKind.HTML:
                return markdown_to_html(rtf_to_markdown(content))
        if source is FormatKind.HTML:
            if target is FormatKind.MARKDOWN:
                return html_to_markdown(content)
            if target is FormatKind.PLAIN:
                return markdown_to_text(html_to_markdown(content))
        raise ExternalConversionError(
            f"No native extraction for {source.value} -> {target.value}",
            code=UNSUPPORTED_CONVERSION_PAIR,
        )


PANDOC_FORMATS: dict[FormatKind, str] = {
    FormatKind.RTF: "rtf",
    FormatKind.HTML: "html",
    FormatKind.MARKDOWN: "markdown",
    FormatKind.PLAIN: "plain",
    FormatKind.CSV: "csv",
    FormatKind.TSV: "tsv",
    FormatKind.JSON: "json",
}


class PandocConverter:
    name = "pandoc"

    def __init__(self) -> None:
        try:
            import pypandoc
        except ModuleNotFoundError as exc:  # pragma: no cover - import guard
            raise ExternalConversionError("pypandoc dependency is required for the pandoc backend") from exc

        self._pandoc = pypandoc

    def convert(self, source: FormatKind, target: FormatKind, content: str) -> str:
        reader = PANDOC_FORMATS.get(source)
        writer = PANDOC_FORMATS.get(target)
        if reader is None or writer is None or writer in {"csv", "tsv"}:
            raise ExternalConversionError(
                f"pandoc cannot convert {source.value} -> {target.value}",
                code=UNSUPPORTED_CONVERSION_PAIR,
            )
        extra_args = ["--standalone"] if target is FormatKind.RTF else []
        try:
            return self._pandoc.convert_text(content, writer, format=reader, extra_args=extra_args)
        except (OSError, RuntimeError) as exc:
            raise ExternalConversionError(f"pandoc failed: {exc}") from exc


MARKITDOWN_SUFFIXES: dict[FormatKind, str] = {
    FormatKind.HTML: ".html",
    FormatKind.CSV: ".csv",
    FormatKind.JSON: ".json",
    FormatKind.XML: ".xml",
    FormatKind.PLAIN: ".txt",
}


class MarkItDownConverter:
    name = "markitdown"

    def __init__(self) -> None:
        try:
            from markitdown import MarkItDown
        except ModuleNotFoundError as exc:  # pragma: no cover - import guard
            raise ExternalConversionError("markitdown dependency is required for the markitdown backend") from exc

        self._converter = MarkItDown()

    def convert(self, source: FormatKind, target: FormatKind, content: str) -> str:
        suffix = MARKITDOWN_SUFFIXES.get(source)
        if suffix is None or target not in {FormatKind.MARKDOWN, FormatKind.PLAIN}:
            raise ExternalConversionError(
                f"markitdown cannot convert {source.value} -> {target.value}",
                code=UNSUPPORTED_CONVERSION_PAIR,
            )
        with tempfile.TemporaryDirectory() as workdir:
            path = Path(workdir) / f"input{suffix}"
            path.write_text(content, encoding="utf-8")
            try:
                result = self._converter.convert(str(path))
            except Exception as exc:
                raise ExternalConversionError(f"markitdown failed: {exc}") from exc
        markdown = str(result.text_content) if hasattr(result, "text_content") else str(result)
        if target is FormatKind.PLAIN:
            return markdown_to_text(markdown)
        return markdown


_CONVERTER_CLASSES: Dict[str, Type[ExternalConverter]] = {
    "regex": RegexConverter,
    "pandoc": PandocConverter,
    "markitdown": MarkItDownConverter,
}


@lru_cache(maxsize=len(_CONVERTER_CLASSES))
def get_converter(name: str) -> ExternalConverter:
    converter_cls = _CONVERTER_CLASSES.get(name)
    if not converter_cls:
        raise KeyError(f"No external converter registered for {name!r}")
    return converter_cls()  # type: ignore[return-value]


def available_backends() -> tuple[str, ...]:
    return tuple(_CONVERTER_CLASSES)


__all__ = [
    "ExternalConverter",
    "MarkItDownConverter",
    "PandocConverter",
    "RegexConverter",
    "available_backends",
    "get_converter",
    "html_to_markdown",
    "rtf_to_markdown",
]
