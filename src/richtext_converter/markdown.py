"""Lightweight markup transpiler (Markdown -> RTF / HTML / plain text)."""

from __future__ import annotations

import html

from .blocks import (
    BlankLine,
    Blockquote,
    CodeBlock,
    Heading,
    HorizontalRule,
    ListItem,
    TextLine,
    clamp_heading_level,
    tokenize_blocks,
)
from .emitter import (
    LINE_BREAK,
    PARAGRAPH_BREAK,
    emit_heading,
    emit_horizontal_rule,
    emit_paragraph_defaults,
    emit_paragraph_reset,
    emit_preamble,
    escape_text,
)
from .inline import parse_inline, render_html, render_rtf, render_text
from .lists import HtmlListRenderer, ListStateTracker, RtfListRenderer
from .models import DocumentProperties, ListKind

HEADING_SIZES: tuple[int, ...] = (32, 28, 24, 20, 18, 16)


def heading_size(level: int) -> int:
    return HEADING_SIZES[clamp_heading_level(level) - 1]


def markdown_to_rtf(text: str, props: DocumentProperties) -> str:
    def inline(source: str) -> str:
        return render_rtf(parse_inline(source, legacy_underline=props.legacy_underline), props)

    tracker = ListStateTracker(RtfListRenderer(props))
    body: list[str] = []
    paragraph: list[str] = []

    def flush_paragraph() -> None:
        if paragraph:
            body.append(LINE_BREAK.join(paragraph) + PARAGRAPH_BREAK)
            paragraph.clear()

    for block in tokenize_blocks(text):
        if isinstance(block, ListItem):
            flush_paragraph()
            body.append(tracker.feed(block.kind, block.level, inline(block.text)))
            continue
        body.append(tracker.close())
        if isinstance(block, TextLine):
            paragraph.append(inline(block.text))
            continue
        flush_paragraph()
        if isinstance(block, Heading):
            body.append(emit_heading(inline(block.text), heading_size(block.level)))
        elif isinstance(block, Blockquote):
            body.append(
                f"\\pard\\li{props.margin}\\ri{props.margin} {inline(block.text)}{PARAGRAPH_BREAK}"
                f"{emit_paragraph_reset(props)}"
            )
        elif isinstance(block, CodeBlock):
            opener, closer = props.style("code")
            code = LINE_BREAK.join(escape_text(line) for line in block.lines)
            body.append(f"{opener}{code}{closer}{PARAGRAPH_BREAK}")
        elif isinstance(block, HorizontalRule):
            body.append(emit_horizontal_rule(props))
    flush_paragraph()
    body.append(tracker.close())
    return f"{emit_preamble(props)}{emit_paragraph_defaults(props)}{''.join(body)}"


def markdown_to_html(text: str, *, legacy_underline: bool = False) -> str:
    def inline(source: str) -> str:
        return render_html(parse_inline(source, legacy_underline=legacy_underline))

    tracker = ListStateTracker(HtmlListRenderer())
    parts: list[str] = []
    paragraph: list[str] = []
    quote: list[str] = []

    def flush() -> None:
        if paragraph:
            parts.append("<p>" + "<br>\n".join(paragraph) + "</p>\n")
            paragraph.clear()
        if quote:
            parts.append("<blockquote>" + "<br>\n".join(quote) + "</blockquote>\n")
            quote.clear()

    for block in tokenize_blocks(text):
        if isinstance(block, ListItem):
            flush()
            parts.append(tracker.feed(block.kind, block.level, inline(block.text)))
            continue
        parts.append(tracker.close())
        if isinstance(block, TextLine):
            if quote:
                flush()
            paragraph.append(inline(block.text))
            continue
        if isinstance(block, Blockquote):
            if paragraph:
                flush()
            quote.append(inline(block.text))
            continue
        flush()
        if isinstance(block, Heading):
            parts.append(f"<h{block.level}>{inline(block.text)}</h{block.level}>\n")
        elif isinstance(block, CodeBlock):
            language = f' class="language-{html.escape(block.language)}"' if block.language else ""
            code = html.escape("\n".join(block.lines), quote=False)
            parts.append(f"<pre><code{language}>{code}</code></pre>\n")
        elif isinstance(block, HorizontalRule):
            parts.append("<hr>\n")
    flush()
    parts.append(tracker.close())
    return "".join(parts)


def markdown_to_text(text: str) -> str:
    lines: list[str] = []
    counters: dict[int, int] = {}
    for block in tokenize_blocks(text):
        if not isinstance(block, ListItem):
            counters.clear()
        if isinstance(block, (Heading, TextLine, Blockquote)):
            lines.append(render_text(parse_inline(block.text)))
        elif isinstance(block, ListItem):
            for deeper in [key for key in counters if key > block.level]:
                del counters[deeper]
            counters[block.level] = counters.get(block.level, 0) + 1
            marker = "-" if block.kind is ListKind.BULLET else f"{counters[block.level]}."
            lines.append(f"{'  ' * block.level}{marker} {render_text(parse_inline(block.text))}")
        elif isinstance(block, CodeBlock):
            lines.extend(block.lines)
        elif isinstance(block, BlankLine):
            lines.append("")
        elif isinstance(block, HorizontalRule):
            lines.append("")
    return "\n".join(lines)


__all__ = [
    "HEADING_SIZES",
    "heading_size",
    "markdown_to_html",
    "markdown_to_rtf",
    "markdown_to_text",
]
