import pytest

from richtext_converter.detection import (
    DetectionError,
    FormatKind,
    detect,
    detect_format,
    markdown_score,
)
from richtext_converter.emitter import emit_preamble
from richtext_converter.models import DocumentProperties


def test_detect_csv_when_commas_match() -> None:
    result = detect_format("a,b,c,d\n1,2,3,4\n5,6,7,8")
    assert result.kind is FormatKind.CSV
    assert result.kind.delimiter == ","


def test_detect_tsv_when_tabs_match() -> None:
    result = detect_format("a\tb\tc\td\n1\t2\t3\t4")
    assert result.kind is FormatKind.TSV
    assert result.kind.delimiter == "\t"


def test_detect_tabular_needs_two_lines() -> None:
    assert detect("a,b,c,d") is FormatKind.PLAIN


def test_detect_html_document_and_fragment() -> None:
    document = detect_format("<!DOCTYPE html><html><body><p>Hi</p></body></html>")
    fragment = detect_format("<p>Hello</p>")
    assert document.kind is FormatKind.HTML
    assert fragment.kind is FormatKind.HTML
    assert document.confidence > fragment.confidence


def test_detect_json_object_and_array() -> None:
    assert detect('{"name": "value", "n": 1}') is FormatKind.JSON
    assert detect("[1, 2, 3]") is FormatKind.JSON
    assert detect('{"name": "value"') is not FormatKind.JSON


def test_detect_markdown_needs_two_signals() -> None:
    assert detect("# Title\n\nSome **bold** text") is FormatKind.MARKDOWN
    assert markdown_score("just **one** thing") == 1
    assert detect("just **one** thing") is FormatKind.PLAIN


def test_detect_lone_heading_is_markdown() -> None:
    result = detect_format("# Title")
    assert result.kind is FormatKind.MARKDOWN
    assert result.confidence == pytest.approx(0.5)


def test_detect_xml() -> None:
    assert detect('<?xml version="1.0"?><note><to>x</to></note>') is FormatKind.XML
    assert detect("<note><to>Tove</to></note>") is FormatKind.XML


def test_detect_rich_text_document() -> None:
    document = emit_preamble(DocumentProperties()) + "Hello {\\b world}\\par "
    result = detect_format(document)
    assert result.kind is FormatKind.RTF
    assert result.confidence == pytest.approx(1.0)


def test_unbalanced_rich_text_is_not_rtf() -> None:
    assert detect("{\\rtf1\\ansi\\deff0 {\\b hello") is not FormatKind.RTF


@pytest.mark.parametrize("content", ["", "   \n", None, 42])
def test_detect_empty_or_unset_is_plain(content) -> None:
    result = detect_format(content)
    assert result.kind is FormatKind.PLAIN
    assert result.confidence == 0.0


def test_detect_plain_fallback() -> None:
    result = detect_format("just some ordinary words")
    assert result.kind is FormatKind.PLAIN
    assert result.confidence == 1.0


def test_threshold_rejects_weak_matches() -> None:
    assert detect("# Title", min_confidence=0.9) is FormatKind.PLAIN


def test_hint_confirmed_by_content() -> None:
    result = detect_format("a,b\n1,2", hint="text/csv; charset=utf-8")
    assert result.kind is FormatKind.CSV


def test_hint_ignored_when_content_disagrees() -> None:
    assert detect_format("plain words", hint="text/html").kind is FormatKind.PLAIN


def test_format_kind_parse_aliases() -> None:
    assert FormatKind.parse("md") is FormatKind.MARKDOWN
    assert FormatKind.parse("Rich-Text") is FormatKind.RTF
    assert FormatKind.parse(FormatKind.TSV) is FormatKind.TSV
    with pytest.raises(DetectionError):
        FormatKind.parse("docx")
