from __future__ import annotations

from typing import Protocol

from .emitter import (
    LIST_BASE_INDENT,
    LIST_INDENT,
    emit_list_override,
    emit_list_table_skeleton,
    emit_paragraph_reset,
)
from .models import DocumentProperties, ListContext, ListKind

BULLET_MARKERS = ("\\bullet", "\\u9702 ?", "\\u9642 ?")


class ListRenderer(Protocol):
    def open_run(self, context: ListContext) -> str:  # pragma: no cover - interface
        ...

    def item(self, context: ListContext, previous_level: int | None, body: str, ordinal: int) -> str:  # pragma: no cover - interface
        ...

    def close_run(self, context: ListContext) -> str:  # pragma: no cover - interface
        ...


class RtfListRenderer:
    def __init__(self, props: DocumentProperties) -> None:
        self._props = props

    def open_run(self, context: ListContext) -> str:
        return emit_list_table_skeleton(context.kind, context.list_id) + emit_list_override(context.list_id) + "\n"

    def item(self, context: ListContext, previous_level: int | None, body: str, ordinal: int) -> str:
        level = context.level
        if context.kind is ListKind.BULLET:
            marker = BULLET_MARKERS[level % len(BULLET_MARKERS)]
        else:
            marker = f"{ordinal}."
        if level == 0:
            layout = f"\\ilvl0\\fi-{LIST_INDENT}\\li{LIST_BASE_INDENT}\\sa{self._props.paragraph_spacing}"
        else:
            indent = LIST_BASE_INDENT + LIST_INDENT * level
            layout = f"\\ilvl{level}\\fi-{LIST_INDENT}\\li{indent}\\sa0"
        return f"\\pard\\ls{context.list_id}{layout} {{\\pntext {marker}\\tab}}{body}\\par\n"

    def close_run(self, context: ListContext) -> str:
        return emit_paragraph_reset(self._props)


class HtmlListRenderer:
    @staticmethod
    def _tag(context: ListContext) -> str:
        return "ul" if context.kind is ListKind.BULLET else "ol"

    def open_run(self, context: ListContext) -> str:
        return f"<{self._tag(context)}>"

    def item(self, context: ListContext, previous_level: int | None, body: str, ordinal: int) -> str:
        tag = self._tag(context)
        if previous_level is None:
            return f"\n<li>{body}"
        if context.level > previous_level:
            return f"\n<{tag}>\n<li>{body}"
        closing = f"</{tag}></li>\n" * (previous_level - context.level)
        return f"</li>\n{closing}<li>{body}"

    def close_run(self, context: ListContext) -> str:
        tag = self._tag(context)
        return "</li>\n" + f"</{tag}></li>\n" * context.level + f"</{tag}>\n"


class ListStateTracker:
    """Line-by-line list state machine.

    Idle until the first list line arrives, then InBullet/InOrdered at the
    line's indentation level. Entering a run emits its list definition once;
    ``close`` (called for any non-list line) leaves the run. Switching list
    kind mid-run closes the current run and opens a fresh one, so bullet and
    ordered lists never share a definition.
    """

    def __init__(self, renderer: ListRenderer) -> None:
        self._renderer = renderer
        self._context: ListContext | None = None
        self._runs = 0
        self._counters: dict[int, int] = {}

    @property
    def context(self) -> ListContext | None:
        return self._context

    @property
    def state(self) -> str:
        if self._context is None:
            return "idle"
        return f"in_{self._context.kind.value}({self._context.level})"

    @property
    def runs(self) -> int:
        return self._runs

    def feed(self, kind: ListKind, level: int, body: str) -> str:
        parts: list[str] = []
        context = self._context
        if context is not None and context.kind is not kind:
            parts.append(self.close())
            context = None
        previous_level: int | None = None
        if context is None:
            self._runs += 1
            self._counters = {}
            context = ListContext(kind=kind, level=0, list_id=self._runs)
            self._context = context
            parts.append(self._renderer.open_run(context))
            level = 0
        else:
            previous_level = context.level
            level = max(0, min(level, previous_level + 1))
        for deeper in [key for key in self._counters if key > level]:
            del self._counters[deeper]
        self._counters[level] = self._counters.get(level, 0) + 1
        context.level = level
        parts.append(self._renderer.item(context, previous_level, body, self._counters[level]))
        return "".join(parts)

    def close(self) -> str:
        context = self._context
        if context is None:
            return ""
        context.active = False
        self._context = None
        return self._renderer.close_run(context)


__all__ = [
    "HtmlListRenderer",
    "ListRenderer",
    "ListStateTracker",
    "RtfListRenderer",
]
