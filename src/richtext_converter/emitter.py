"""Control-word (RTF) document scaffolding.

Everything that writes raw control words lives here so that the escaping
rules are applied exactly once, at emission time.
"""

from __future__ import annotations

from .models import DocumentProperties, ListKind

LINE_BREAK = "\\line "
PARAGRAPH_BREAK = "\\par\n"
LIST_INDENT = 360
LIST_BASE_INDENT = 720

_LEVEL_TEXT = {
    ListKind.BULLET: ("{\\leveltext\\leveltemplateid1\\'01\\u8226 ?;}", "{\\levelnumbers;}", 23),
    ListKind.ORDERED: ("{\\leveltext\\leveltemplateid2\\'02\\'00.;}", "{\\levelnumbers\\'01;}", 0),
}


def to_half_points(points: int) -> int:
    if isinstance(points, bool) or not isinstance(points, int):
        raise TypeError(f"Point sizes must be integers, got {points!r}")
    return points * 2


def emit_preamble(props: DocumentProperties) -> str:
    red, green, blue = props.font_color
    return (
        f"{{\\rtf1\\ansi\\deff0\\nouicompat\\deflang{props.language}"
        f"{{\\fonttbl{{\\f0\\fnil\\fcharset{props.charset} {escape_text(props.font_family)};}}}}}}"
        f"{{\\colortbl ;\\red{red}\\green{green}\\blue{blue};}}"
        f"\\viewkind4\\uc1\\pard\\cf1\\f0\\fs{to_half_points(props.font_size)} "
    )


def emit_paragraph_defaults(props: DocumentProperties) -> str:
    return f"\\sa{props.paragraph_spacing}\\sl{props.line_height}\\slmult1 "


def emit_paragraph_reset(props: DocumentProperties) -> str:
    return "\\pard" + emit_paragraph_defaults(props)


def emit_list_table_skeleton(kind: ListKind = ListKind.BULLET, list_id: int = 1) -> str:
    level_text, level_numbers, number_format = _LEVEL_TEXT[kind]
    return (
        f"{{\\*\\listtable{{\\list\\listtemplateid{kind.template_id}\\listhybrid"
        f"{{\\listlevel\\levelnfc{number_format}\\levelnfcn{number_format}\\leveljc0\\leveljcn0"
        f"\\levelfollow0\\levelstartat1\\levelspace0\\levelindent0"
        f"{level_text}{level_numbers}\\fi-{LIST_INDENT}\\li{LIST_BASE_INDENT}\\lin{LIST_BASE_INDENT} }}"
        f"{{\\listname ;}}\\listid{list_id}}}}}"
    )


def emit_list_override(list_id: int) -> str:
    return f"{{\\*\\listoverridetable{{\\listoverride\\listid{list_id}\\listoverridecount0\\ls{list_id}}}}}"


def emit_heading(text: str, points: int) -> str:
    return f"{{\\b\\fs{to_half_points(points)} {text}}}{PARAGRAPH_BREAK}"


def emit_hyperlink(url: str, label: str) -> str:
    target = escape_text(url).replace('"', "%22")
    return f'{{\\field{{\\*\\fldinst{{HYPERLINK "{target}"}}}}{{\\fldrslt{{\\ul {label}}}}}}}'


def emit_horizontal_rule(props: DocumentProperties) -> str:
    return f"\\pard\\brdrb\\brdrs\\brdrw10\\brsp20 \\par\n{emit_paragraph_reset(props)}"


def escape_text(text: str) -> str:
    parts: list[str] = []
    for char in text:
        code = ord(char)
        if char in "\\{}":
            parts.append("\\" + char)
        elif char == "\t":
            parts.append("\\tab ")
        elif char == "\n":
            parts.append(LINE_BREAK)
        elif code < 128:
            parts.append(char)
        elif code <= 0xFFFF:
            parts.append(_unicode_escape(code))
        else:
            code -= 0x10000
            parts.append(_unicode_escape(0xD800 + (code >> 10)))
            parts.append(_unicode_escape(0xDC00 + (code & 0x3FF)))
    return "".join(parts)


def _unicode_escape(code: int) -> str:
    signed = code - 0x10000 if code > 0x7FFF else code
    return f"\\u{signed}?"


def wrap_plain_text(text: str, props: DocumentProperties) -> str:
    """Minimal document: every source line becomes one escaped paragraph."""

    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    body = "\\par\n".join(escape_text(line) for line in normalized.split("\n"))
    return f"{emit_preamble(props)}{emit_paragraph_defaults(props)}{body}"


__all__ = [
    "LINE_BREAK",
    "PARAGRAPH_BREAK",
    "emit_heading",
    "emit_horizontal_rule",
    "emit_hyperlink",
    "emit_list_override",
    "emit_list_table_skeleton",
    "emit_paragraph_defaults",
    "emit_paragraph_reset",
    "emit_preamble",
    "escape_text",
    "to_half_points",
    "wrap_plain_text",
]
