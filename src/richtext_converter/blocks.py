"""Line-level tokenizer for lightweight markup."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator, Union

from .models import ListKind

TAB_WIDTH = 4
INDENT_UNIT = 2
MAX_HEADING_LEVEL = 6

HEADING_RE = re.compile(r"^(#+)\s+(.*?)(?:\s+#+)?\s*$")
BULLET_RE = re.compile(r"^( *)[-*+•]\s+(.+)$")
ORDERED_RE = re.compile(r"^( *)(\d+)[.)]\s+(.+)$")
BLOCKQUOTE_RE = re.compile(r"^\s{0,3}>\s?(.*)$")
FENCE_RE = re.compile(r"^\s{0,3}(```+|~~~+)\s*([\w+-]*)\s*$")
RULE_RE = re.compile(r"^\s{0,3}(?:-\s*){3,}$|^\s{0,3}(?:\*\s*){3,}$|^\s{0,3}(?:_\s*){3,}$")


@dataclass(slots=True)
class Heading:
    level: int
    text: str


@dataclass(slots=True)
class ListItem:
    kind: ListKind
    level: int
    text: str


@dataclass(slots=True)
class TextLine:
    text: str


@dataclass(slots=True)
class BlankLine:
    pass


@dataclass(slots=True)
class Blockquote:
    text: str


@dataclass(slots=True)
class CodeBlock:
    language: str = ""
    lines: list[str] = field(default_factory=list)


@dataclass(slots=True)
class HorizontalRule:
    pass


Block = Union[Heading, ListItem, TextLine, BlankLine, Blockquote, CodeBlock, HorizontalRule]


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def expand_indent(line: str) -> str:
    """Replace leading tabs with spaces; one tab counts as four spaces."""

    stripped = line.lstrip(" \t")
    prefix = line[: len(line) - len(stripped)]
    return prefix.replace("\t", " " * TAB_WIDTH) + stripped


def clamp_heading_level(level: int) -> int:
    return max(1, min(level, MAX_HEADING_LEVEL))


def match_list_item(line: str) -> ListItem | None:
    expanded = expand_indent(line)
    match = BULLET_RE.match(expanded)
    if match and not RULE_RE.match(expanded):
        return ListItem(kind=ListKind.BULLET, level=len(match.group(1)) // INDENT_UNIT, text=match.group(2))
    match = ORDERED_RE.match(expanded)
    if match:
        return ListItem(kind=ListKind.ORDERED, level=len(match.group(1)) // INDENT_UNIT, text=match.group(3))
    return None


def tokenize_blocks(text: str) -> Iterator[Block]:
    lines = normalize_newlines(text).split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    code: CodeBlock | None = None
    fence = ""
    for line in lines:
        if code is not None:
            if line.strip().startswith(fence) and not line.strip().strip(fence[0]):
                yield code
                code = None
            else:
                code.lines.append(line)
            continue
        fence_match = FENCE_RE.match(line)
        if fence_match:
            fence = fence_match.group(1)
            code = CodeBlock(language=fence_match.group(2))
            continue
        if not line.strip():
            yield BlankLine()
            continue
        heading = HEADING_RE.match(line)
        if heading:
            yield Heading(level=clamp_heading_level(len(heading.group(1))), text=heading.group(2))
            continue
        if RULE_RE.match(line):
            yield HorizontalRule()
            continue
        item = match_list_item(line)
        if item is not None:
            yield item
            continue
        quote = BLOCKQUOTE_RE.match(line)
        if quote:
            yield Blockquote(text=quote.group(1))
            continue
        yield TextLine(text=line.strip())
    if code is not None:
        yield code


__all__ = [
    "Block",
    "BlankLine",
    "Blockquote",
    "CodeBlock",
    "Heading",
    "HorizontalRule",
    "ListItem",
    "TextLine",
    "clamp_heading_level",
    "expand_indent",
    "match_list_item",
    "normalize_newlines",
    "tokenize_blocks",
]
