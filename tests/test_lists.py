from richtext_converter.lists import HtmlListRenderer, ListStateTracker, RtfListRenderer
from richtext_converter.models import DocumentProperties, ListKind


def _rtf_tracker() -> ListStateTracker:
    return ListStateTracker(RtfListRenderer(DocumentProperties()))


def test_single_table_per_run() -> None:
    tracker = _rtf_tracker()
    output = "".join(tracker.feed(ListKind.BULLET, 0, f"item {n}") for n in range(5))
    output += tracker.close()
    assert output.count("\\listtable") == 1
    assert output.count("\\listoverridetable") == 1
    assert output.count("{\\pntext \\bullet\\tab}") == 5
    assert output.endswith("\\pard\\sa200\\sl276\\slmult1 ")


def test_state_transitions() -> None:
    tracker = _rtf_tracker()
    assert tracker.state == "idle"
    tracker.feed(ListKind.BULLET, 0, "a")
    assert tracker.state == "in_bullet(0)"
    tracker.feed(ListKind.BULLET, 1, "b")
    assert tracker.state == "in_bullet(1)"
    assert tracker.context is not None and tracker.context.active
    context = tracker.context
    tracker.close()
    assert tracker.state == "idle"
    assert not context.active
    assert tracker.close() == ""


def test_kind_switch_starts_new_run() -> None:
    tracker = _rtf_tracker()
    output = tracker.feed(ListKind.BULLET, 0, "a") + tracker.feed(ListKind.ORDERED, 0, "b") + tracker.close()
    assert output.count("\\listtable") == 2
    assert "\\listtemplateid1" in output
    assert "\\listtemplateid2" in output
    assert "\\ls2\\ilvl0" in output
    assert tracker.runs == 2


def test_nested_level_formatting() -> None:
    tracker = _rtf_tracker()
    tracker.feed(ListKind.BULLET, 0, "top")
    nested = tracker.feed(ListKind.BULLET, 3, "child")
    assert "\\ilvl1\\fi-360\\li1080\\sa0" in nested
    assert "\\u9702 ?" in nested


def test_first_item_starts_at_top_level() -> None:
    tracker = _rtf_tracker()
    first = tracker.feed(ListKind.BULLET, 2, "indented")
    assert "\\ilvl0\\fi-360\\li720\\sa200" in first


def test_ordered_numbering_restarts_after_nesting() -> None:
    tracker = _rtf_tracker()
    parts = [
        tracker.feed(ListKind.ORDERED, 0, "one"),
        tracker.feed(ListKind.ORDERED, 1, "nested"),
        tracker.feed(ListKind.ORDERED, 0, "two"),
    ]
    assert "{\\pntext 1.\\tab}one" in parts[0]
    assert "{\\pntext 1.\\tab}nested" in parts[1]
    assert "{\\pntext 2.\\tab}two" in parts[2]


def test_html_renderer_nests_containers() -> None:
    tracker = ListStateTracker(HtmlListRenderer())
    output = (
        tracker.feed(ListKind.BULLET, 0, "a")
        + tracker.feed(ListKind.BULLET, 1, "b")
        + tracker.feed(ListKind.BULLET, 0, "c")
        + tracker.close()
    )
    assert output == "<ul>\n<li>a\n<ul>\n<li>b</li>\n</ul></li>\n<li>c</li>\n</ul>\n"
