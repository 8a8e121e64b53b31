"""Structural checks for control-word (RTF) documents."""

from __future__ import annotations

import re
from dataclasses import dataclass

RTF_MARKER = "{\\rtf"
MIN_SIGNATURES = 2

RTF_SIGNATURES: dict[str, re.Pattern[str]] = {
    "font_table": re.compile(r"\{\\fonttbl"),
    "color_table": re.compile(r"\{\\colortbl"),
    "charset": re.compile(r"\\(?:ansi|mac|pca?)(?![a-z])"),
    "default_font": re.compile(r"\\deff\d+"),
    "paragraph_reset": re.compile(r"\\pard(?![a-z])"),
    "font_size": re.compile(r"\\fs\d+"),
    "color_ref": re.compile(r"\\cf\d+"),
    "bold": re.compile(r"\\b0?(?![a-z])"),
    "italic": re.compile(r"\\i0?(?![a-z])"),
    "underline": re.compile(r"\\ul(?:none|0)?(?![a-z])"),
    "strike": re.compile(r"\\strike0?(?![a-z])"),
    "break": re.compile(r"\\(?:par|line)(?![a-z])"),
    "alignment": re.compile(r"\\q[lcrj](?![a-z])"),
    "hex_escape": re.compile(r"\\'[0-9a-fA-F]{2}"),
    "unicode_escape": re.compile(r"\\u-?\d+"),
    "group": re.compile(r"(?<!\\)\{[^{}]*(?<!\\)\}"),
    "control_word": re.compile(r"\\[a-z]{1,32}-?\d*"),
}


@dataclass(slots=True)
class ValidationVerdict:
    is_valid: bool
    confidence: int
    balance_delta: int


def count_signatures(candidate: str) -> int:
    return sum(1 for pattern in RTF_SIGNATURES.values() if pattern.search(candidate))


def group_balance(candidate: str) -> tuple[int, bool]:
    """Scan group markers once, left to right.

    Returns the final open-minus-close count and whether the running count
    ever dropped below zero. Escaped braces and escaped backslashes are
    skipped.
    """

    depth = 0
    underflow = False
    index = 0
    length = len(candidate)
    while index < length:
        char = candidate[index]
        if char == "\\":
            index += 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                underflow = True
        index += 1
    return depth, underflow


def validate(candidate: str | None) -> ValidationVerdict:
    if not candidate:
        return ValidationVerdict(is_valid=False, confidence=0, balance_delta=0)
    confidence = count_signatures(candidate)
    delta, underflow = group_balance(candidate)
    balanced = delta == 0 and not underflow
    has_marker = candidate.lstrip().startswith(RTF_MARKER)
    is_valid = balanced and has_marker and confidence >= MIN_SIGNATURES
    return ValidationVerdict(is_valid=is_valid, confidence=confidence, balance_delta=delta)


__all__ = [
    "MIN_SIGNATURES",
    "RTF_MARKER",
    "RTF_SIGNATURES",
    "ValidationVerdict",
    "count_signatures",
    "group_balance",
    "validate",
]
