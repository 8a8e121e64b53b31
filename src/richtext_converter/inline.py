"""Inline span parsing and rendering.

A line is tokenized into a small span tree first and rendered afterwards,
so delimiter precedence is decided in one place: at every position the
candidates are tried in ``_rules`` order and the first match wins.
Bold comes before italic, strike before the single-tilde underline.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from typing import Union

from .emitter import emit_hyperlink, escape_text
from .models import DocumentProperties


@dataclass(slots=True)
class Text:
    text: str


@dataclass(slots=True)
class Styled:
    style: str
    children: list["Span"] = field(default_factory=list)


@dataclass(slots=True)
class Code:
    text: str


@dataclass(slots=True)
class Link:
    url: str
    children: list["Span"] = field(default_factory=list)


@dataclass(slots=True)
class Image:
    src: str
    alt: str = ""


Span = Union[Text, Styled, Code, Link, Image]

ESCAPE_RE = re.compile(r"\\([\\`*_~\[\]()#!>+\-.{}|])")
CODE_RE = re.compile(r"`([^`]+)`")
IMAGE_RE = re.compile(r"!\[([^\]]*)\]\(([^)\s]+)(?:\s+\"[^\"]*\")?\)")
LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)\s]+)(?:\s+\"[^\"]*\")?\)")
BOLD_STAR_RE = re.compile(r"\*\*(?=\S)(.+?)(?<=\S)\*\*")
BOLD_UNDERSCORE_RE = re.compile(r"__(?=\S)(.+?)(?<=\S)__")
STRIKE_RE = re.compile(r"~~(?=\S)(.+?)(?<=\S)~~")
TILDE_UNDERLINE_RE = re.compile(r"~(?![~\s])(.+?)(?<![~\s])~(?!~)")
ITALIC_STAR_RE = re.compile(r"(?<!\*)\*(?![\s*])(.+?)(?<![\s*])\*(?!\*)")
ITALIC_UNDERSCORE_RE = re.compile(r"(?<![\w_])_(?![\s_])(.+?)(?<![\s_])_(?![\w_])")

TRIGGERS = frozenset("\\`![*_~")

HTML_TAGS = {
    "bold": "strong",
    "italic": "em",
    "underline": "u",
    "strike": "s",
}


def _rules(legacy_underline: bool) -> tuple[tuple[re.Pattern[str], str], ...]:
    return (
        (ESCAPE_RE, "escape"),
        (CODE_RE, "code"),
        (IMAGE_RE, "image"),
        (LINK_RE, "link"),
        (BOLD_STAR_RE, "bold"),
        (BOLD_UNDERSCORE_RE, "underline" if legacy_underline else "bold"),
        (STRIKE_RE, "strike"),
        (TILDE_UNDERLINE_RE, "underline"),
        (ITALIC_STAR_RE, "italic"),
        (ITALIC_UNDERSCORE_RE, "italic"),
    )


def parse_inline(line: str, *, legacy_underline: bool = False) -> list[Span]:
    """Tokenize a single line of lightweight markup into spans."""

    rules = _rules(legacy_underline)
    spans: list[Span] = []
    buffer: list[str] = []
    index = 0
    length = len(line)

    def flush() -> None:
        if buffer:
            spans.append(Text("".join(buffer)))
            buffer.clear()

    while index < length:
        char = line[index]
        if char not in TRIGGERS:
            buffer.append(char)
            index += 1
            continue
        for pattern, kind in rules:
            match = pattern.match(line, index)
            if match is None:
                continue
            if kind == "escape":
                buffer.append(match.group(1))
            else:
                flush()
                spans.append(_build_span(kind, match, legacy_underline))
            index = match.end()
            break
        else:
            buffer.append(char)
            index += 1
    flush()
    return spans


def _build_span(kind: str, match: re.Match[str], legacy_underline: bool) -> Span:
    if kind == "code":
        return Code(match.group(1))
    if kind == "image":
        return Image(src=match.group(2), alt=match.group(1))
    children = parse_inline(match.group(1), legacy_underline=legacy_underline)
    if kind == "link":
        return Link(url=match.group(2), children=children)
    return Styled(style=kind, children=children)


def render_rtf(spans: list[Span], props: DocumentProperties) -> str:
    parts: list[str] = []
    for span in spans:
        if isinstance(span, Text):
            parts.append(escape_text(span.text))
        elif isinstance(span, Styled):
            opener, closer = props.style(span.style)
            parts.append(opener + render_rtf(span.children, props) + closer)
        elif isinstance(span, Code):
            opener, closer = props.style("code")
            parts.append(opener + escape_text(span.text) + closer)
        elif isinstance(span, Link):
            parts.append(emit_hyperlink(span.url, render_rtf(span.children, props)))
        elif isinstance(span, Image):
            parts.append(escape_text(span.alt or span.src))
    return "".join(parts)


def render_html(spans: list[Span]) -> str:
    parts: list[str] = []
    for span in spans:
        if isinstance(span, Text):
            parts.append(html.escape(span.text, quote=False))
        elif isinstance(span, Styled):
            tag = HTML_TAGS[span.style]
            parts.append(f"<{tag}>{render_html(span.children)}</{tag}>")
        elif isinstance(span, Code):
            parts.append(f"<code>{html.escape(span.text, quote=False)}</code>")
        elif isinstance(span, Link):
            parts.append(f'<a href="{html.escape(span.url)}">{render_html(span.children)}</a>')
        elif isinstance(span, Image):
            parts.append(f'<img src="{html.escape(span.src)}" alt="{html.escape(span.alt)}">')
    return "".join(parts)


def render_text(spans: list[Span]) -> str:
    parts: list[str] = []
    for span in spans:
        if isinstance(span, (Text, Code)):
            parts.append(span.text)
        elif isinstance(span, (Styled, Link)):
            parts.append(render_text(span.children))
        elif isinstance(span, Image):
            parts.append(span.alt)
    return "".join(parts)


__all__ = [
    "Code",
    "Image",
    "Link",
    "Span",
    "Styled",
    "Text",
    "parse_inline",
    "render_html",
    "render_rtf",
    "render_text",
]
