import pytest

from richtext_converter.detection import FormatKind, detect
from richtext_converter.emitter import emit_list_override, emit_list_table_skeleton, emit_preamble
from richtext_converter.markdown import (
    HEADING_SIZES,
    heading_size,
    markdown_to_html,
    markdown_to_rtf,
    markdown_to_text,
)
from richtext_converter.models import DocumentProperties
from richtext_converter.validation import validate

SCENARIO = "# Title\n\nThis is **bold** and *italic*.\n\n- item one\n- item two\n"


@pytest.fixture()
def props() -> DocumentProperties:
    return DocumentProperties()


def test_end_to_end_scenario(props: DocumentProperties) -> None:
    output = markdown_to_rtf(SCENARIO, props)
    expected_body = (
        "\\sa200\\sl276\\slmult1 "
        "{\\b\\fs64 Title}\\par\n"
        "This is \\b bold\\b0  and \\i italic\\i0 .\\par\n"
        + emit_list_table_skeleton()
        + emit_list_override(1)
        + "\n"
        "\\pard\\ls1\\ilvl0\\fi-360\\li720\\sa200 {\\pntext \\bullet\\tab}item one\\par\n"
        "\\pard\\ls1\\ilvl0\\fi-360\\li720\\sa200 {\\pntext \\bullet\\tab}item two\\par\n"
        "\\pard\\sa200\\sl276\\slmult1 "
    )
    assert output == emit_preamble(props) + expected_body
    assert output.count("\\listtable") == 1
    assert output.count("{\\pntext ") == 2
    assert detect(output) is FormatKind.RTF


def test_heading_sizes_strictly_decrease(props: DocumentProperties) -> None:
    sizes = [heading_size(level) for level in range(1, 7)]
    assert sizes == list(HEADING_SIZES)
    assert all(larger > smaller for larger, smaller in zip(sizes, sizes[1:]))
    for level, size in enumerate(sizes, start=1):
        assert f"{{\\b\\fs{size * 2} H}}" in markdown_to_rtf("#" * level + " H", props)


def test_heading_levels_are_clamped(props: DocumentProperties) -> None:
    assert heading_size(0) == HEADING_SIZES[0]
    assert "\\fs32 Deep" in markdown_to_rtf("######## Deep", props)


def test_line_and_paragraph_breaks(props: DocumentProperties) -> None:
    single = markdown_to_rtf("line one\nline two", props)
    double = markdown_to_rtf("para one\n\npara two", props)
    assert "line one\\line line two\\par\n" in single
    assert "para one\\par\npara two\\par\n" in double
    assert "\\line \\par" not in double
    assert "\\par\n\\line" not in double


def test_crlf_input_matches_lf(props: DocumentProperties) -> None:
    assert markdown_to_rtf("a\r\nb\r\n\r\n- c", props) == markdown_to_rtf("a\nb\n\n- c", props)


def test_blocks(props: DocumentProperties) -> None:
    output = markdown_to_rtf("> quoted\n\n```python\nx = {1}\n```\n\n---\n", props)
    assert "\\pard\\li720\\ri720 quoted\\par\n\\pard\\sa200\\sl276\\slmult1 " in output
    assert "{\\f0\\highlight0 x = \\{1\\}}\\par\n" in output
    assert "\\brdrb" in output


def test_blockquote_uses_configured_margin() -> None:
    output = markdown_to_rtf("> quoted", DocumentProperties(margin=360))
    assert "\\pard\\li360\\ri360 quoted\\par\n" in output


def test_tab_indented_list_nests(props: DocumentProperties) -> None:
    output = markdown_to_rtf("- top\n\t- nested", props)
    assert "\\ilvl1" in output
    assert output.count("\\listtable") == 1


@pytest.mark.parametrize(
    "source",
    [
        SCENARIO,
        "text with {braces} and \\ backslash",
        "- a\n  - b\n    - c\n1. x\n2. y",
        "*unclosed **markers ~~ here",
        "",
    ],
)
def test_output_is_balanced(source: str, props: DocumentProperties) -> None:
    verdict = validate(markdown_to_rtf(source, props))
    assert verdict.balance_delta == 0
    assert verdict.is_valid


def test_markdown_to_html() -> None:
    html = markdown_to_html("# T\n\n- a\n- b\n\npara **x**")
    assert html == "<h1>T</h1>\n<ul>\n<li>a</li>\n<li>b</li>\n</ul>\n<p>para <strong>x</strong></p>\n"


def test_markdown_to_html_ordered_and_code() -> None:
    html = markdown_to_html("1. one\n2. two\n\n```js\na < b\n```")
    assert html.startswith("<ol>\n<li>one</li>\n<li>two</li>\n</ol>\n")
    assert '<pre><code class="language-js">a &lt; b</code></pre>' in html


def test_markdown_to_text() -> None:
    assert markdown_to_text("# T\n\n**b** and [l](u)\n\n1. x\n2. y") == "T\n\nb and l\n\n1. x\n2. y"
