from richtext_converter.inline import (
    Code,
    Image,
    Link,
    Styled,
    Text,
    parse_inline,
    render_html,
    render_rtf,
    render_text,
)
from richtext_converter.models import DocumentProperties


def test_bold_before_italic() -> None:
    spans = parse_inline("**bold** and *italic*")
    assert spans == [
        Styled("bold", [Text("bold")]),
        Text(" and "),
        Styled("italic", [Text("italic")]),
    ]


def test_rtf_toggles_do_not_overlap() -> None:
    rendered = render_rtf(parse_inline("**bold** and *italic*"), DocumentProperties())
    assert rendered == "\\b bold\\b0  and \\i italic\\i0 "


def test_double_underscore_is_bold_unless_legacy() -> None:
    assert parse_inline("__x__") == [Styled("bold", [Text("x")])]
    assert parse_inline("__x__", legacy_underline=True) == [Styled("underline", [Text("x")])]


def test_tilde_forms() -> None:
    assert parse_inline("~~gone~~") == [Styled("strike", [Text("gone")])]
    assert parse_inline("~under~") == [Styled("underline", [Text("under")])]


def test_code_span_is_literal() -> None:
    assert parse_inline("`a*b*`") == [Code("a*b*")]


def test_links_and_images() -> None:
    assert parse_inline("[site](http://example.com)") == [Link("http://example.com", [Text("site")])]
    assert parse_inline("![logo](logo.png)") == [Image(src="logo.png", alt="logo")]


def test_escapes_and_word_underscores() -> None:
    assert parse_inline("\\*not italic\\*") == [Text("*not italic*")]
    assert parse_inline("snake_case_name") == [Text("snake_case_name")]
    assert parse_inline("2 * 3 * 4") == [Text("2 * 3 * 4")]


def test_nested_styles() -> None:
    spans = parse_inline("**bold _and italic_**")
    assert spans == [Styled("bold", [Text("bold "), Styled("italic", [Text("and italic")])])]


def test_rtf_escaping_happens_at_emission() -> None:
    rendered = render_rtf(parse_inline("{**x**}"), DocumentProperties())
    assert rendered == "\\{\\b x\\b0 \\}"


def test_custom_style_map() -> None:
    props = DocumentProperties(style_map={"strike": ("\\strike\\strikew ", "\\strike0 ")})
    assert render_rtf(parse_inline("~~x~~"), props) == "\\strike\\strikew x\\strike0 "
    assert props.style("bold") == ("\\b ", "\\b0 ")


def test_html_and_text_rendering() -> None:
    spans = parse_inline("**a** & <b> [l](u)")
    assert render_html(spans) == '<strong>a</strong> &amp; &lt;b&gt; <a href="u">l</a>'
    assert render_text(spans) == "a & <b> l"
