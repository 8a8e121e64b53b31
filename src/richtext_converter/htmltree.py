"""Markup tree transpiler (constrained HTML subset -> RTF)."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

from .emitter import (
    LINE_BREAK,
    PARAGRAPH_BREAK,
    emit_heading,
    emit_hyperlink,
    emit_paragraph_defaults,
    emit_paragraph_reset,
    emit_preamble,
    escape_text,
)
from .lists import ListStateTracker, RtfListRenderer
from .models import DocumentProperties, ListKind

ALIGNMENTS = frozenset({"left", "center", "right", "justify"})
ALIGN_CLASS_RE = re.compile(r"^ql-align-(left|center|right|justify)$")
STYLE_ALIGN_RE = re.compile(r"text-align\s*:\s*(left|center|right|justify)", re.IGNORECASE)
WHITESPACE_RE = re.compile(r"\s+")

INLINE_STYLES = {
    "strong": "bold",
    "b": "bold",
    "em": "italic",
    "i": "italic",
    "u": "underline",
    "ins": "underline",
    "s": "strike",
    "strike": "strike",
    "del": "strike",
    "code": "code",
}
PARAGRAPH_TAGS = frozenset({"p", "div", "section", "article", "header", "footer", "tr"})
MINOR_HEADINGS = frozenset({"h3", "h4", "h5", "h6"})
SKIPPED_TAGS = frozenset({"head", "script", "style", "title", "template"})
LIST_TAGS = {"ul": ListKind.BULLET, "ol": ListKind.ORDERED}
TEXT_BLOCK_TAGS = frozenset({"p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "pre", "ul", "ol", "table"})


def heading_points(tag_name: str, props: DocumentProperties) -> int:
    if tag_name == "h1":
        return props.font_size * 2
    return props.font_size * 3 // 2


def alignment_of(tag: Tag) -> str | None:
    align = str(tag.get("align") or "").strip().lower()
    if align in ALIGNMENTS:
        return align
    match = STYLE_ALIGN_RE.search(str(tag.get("style") or ""))
    if match:
        return match.group(1).lower()
    for css_class in tag.get("class") or []:
        class_match = ALIGN_CLASS_RE.match(css_class)
        if class_match:
            return class_match.group(1)
    return None


class _RtfWriter:
    def __init__(self, props: DocumentProperties) -> None:
        self._props = props
        self._parts: list[str] = []
        self._tracker = ListStateTracker(RtfListRenderer(props))
        self._list_kinds: list[ListKind] = []
        self._pending = False
        self._line_start = True

    def output(self) -> str:
        self._end_paragraph()
        self._parts.append(self._tracker.close())
        return "".join(self._parts)

    def walk(self, node: Tag) -> None:
        for child in node.children:
            if isinstance(child, PreformattedString):
                continue
            if isinstance(child, NavigableString):
                self._text(str(child))
            elif isinstance(child, Tag):
                self._element(child)

    def _text(self, raw: str) -> None:
        text = WHITESPACE_RE.sub(" ", raw)
        if self._line_start:
            text = text.lstrip()
        if not text:
            return
        self._parts.append(escape_text(text))
        self._pending = True
        self._line_start = False

    def _end_paragraph(self) -> None:
        if not self._pending:
            return
        if self._parts and self._parts[-1] == LINE_BREAK:
            self._parts.pop()
        self._parts.append(PARAGRAPH_BREAK)
        self._pending = False
        self._line_start = True

    def _capture(self, node: Tag) -> str:
        start = len(self._parts)
        self.walk(node)
        inner = "".join(self._parts[start:])
        del self._parts[start:]
        return inner

    def _element(self, tag: Tag) -> None:
        name = (tag.name or "").lower()
        if name in SKIPPED_TAGS:
            return
        if name == "br":
            self._parts.append(LINE_BREAK)
            self._pending = True
            self._line_start = True
        elif name in INLINE_STYLES:
            opener, closer = self._props.style(INLINE_STYLES[name])
            inner = self._capture(tag)
            if inner:
                self._parts.append(opener + inner + closer)
        elif name == "a" and tag.get("href"):
            inner = self._capture(tag)
            self._parts.append(emit_hyperlink(str(tag["href"]), inner or escape_text(str(tag["href"]))))
            self._pending = True
        elif name in ("h1", "h2"):
            self._heading(tag, heading_points(name, self._props))
        elif name in MINOR_HEADINGS:
            self._heading(tag, None)
        elif name == "pre":
            self._preformatted(tag)
        elif name == "blockquote":
            self._block_start()
            self._parts.append(f"\\pard\\li{self._props.margin}\\ri{self._props.margin} ")
            self.walk(tag)
            self._end_paragraph()
            self._parts.append(emit_paragraph_reset(self._props))
        elif name in LIST_TAGS:
            self._list(tag, LIST_TAGS[name])
        elif name == "li":
            self._list_item(tag)
        elif name in ("td", "th"):
            self.walk(tag)
            self._parts.append("\\tab ")
        elif name in PARAGRAPH_TAGS:
            self._paragraph(tag)
        else:
            self.walk(tag)

    def _block_start(self) -> None:
        self._end_paragraph()

    def _paragraph(self, tag: Tag) -> None:
        self._block_start()
        alignment = alignment_of(tag)
        if alignment:
            self._parts.append(self._props.style(alignment)[0])
        self.walk(tag)
        self._end_paragraph()
        if alignment:
            self._parts.append(emit_paragraph_reset(self._props))

    def _heading(self, tag: Tag, points: int | None) -> None:
        self._block_start()
        inner = self._capture(tag).strip()
        if points is None:
            self._parts.append(f"{{\\b {inner}}}{PARAGRAPH_BREAK}")
        else:
            self._parts.append(emit_heading(inner, points))
        self._pending = False
        self._line_start = True

    def _preformatted(self, tag: Tag) -> None:
        self._block_start()
        opener, closer = self._props.style("code")
        lines = tag.get_text().strip("\n").split("\n")
        code = LINE_BREAK.join(escape_text(line) for line in lines)
        self._parts.append(f"{opener}{code}{closer}{PARAGRAPH_BREAK}")
        self._line_start = True

    def _list(self, tag: Tag, kind: ListKind) -> None:
        self._end_paragraph()
        self._list_kinds.append(kind)
        try:
            self.walk(tag)
        finally:
            self._list_kinds.pop()
        if not self._list_kinds:
            self._parts.append(self._tracker.close())

    def _list_item(self, tag: Tag) -> None:
        kind = self._list_kinds[-1] if self._list_kinds else ListKind.BULLET
        level = max(0, len(self._list_kinds) - 1)
        start = len(self._parts)
        self._line_start = True
        for child in tag.children:
            if isinstance(child, Tag) and (child.name or "").lower() in LIST_TAGS:
                self._emit_item(kind, level, start)
                self._list(child, LIST_TAGS[child.name.lower()])
                start = len(self._parts)
                self._line_start = True
            elif isinstance(child, Tag):
                self._element(child)
            elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
                self._text(str(child))
        self._emit_item(kind, level, start)

    def _emit_item(self, kind: ListKind, level: int, start: int) -> None:
        body = "".join(self._parts[start:]).replace(PARAGRAPH_BREAK, LINE_BREAK).strip()
        del self._parts[start:]
        self._pending = False
        self._line_start = True
        while body.endswith(LINE_BREAK.strip()):
            body = body[: -len(LINE_BREAK.strip())].rstrip()
        if body:
            self._parts.append(self._tracker.feed(kind, level, body))


def html_to_rtf(markup: str, props: DocumentProperties) -> str:
    soup = BeautifulSoup(markup, "html.parser")
    root = soup.body or soup
    writer = _RtfWriter(props)
    writer.walk(root)
    return f"{emit_preamble(props)}{emit_paragraph_defaults(props)}{writer.output()}"


def html_to_text(markup: str) -> str:
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup.find_all(list(SKIPPED_TAGS)):
        tag.decompose()
    for tag in soup.find_all("br"):
        tag.replace_with("\n")
    for tag in soup.find_all(["li", "tr"]):
        tag.insert_after("\n")
    for tag in soup.find_all(list(TEXT_BLOCK_TAGS)):
        tag.insert_after("\n\n")
    blocks = []
    for line in soup.get_text().split("\n"):
        blocks.append(WHITESPACE_RE.sub(" ", line).strip())
    text = "\n".join(blocks)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


__all__ = [
    "alignment_of",
    "heading_points",
    "html_to_rtf",
    "html_to_text",
]
