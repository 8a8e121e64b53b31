from __future__ import annotations

import csv
import html
import time
from dataclasses import dataclass
from functools import lru_cache
from io import StringIO
from typing import Callable

from .config import AppConfig, apply_settings, load_config
from .detection import DetectionError, DetectionResult, FormatKind
from .detection import detect_format as classify
from .emitter import wrap_plain_text
from .errors import (
    AMBIGUOUS_DETECTION,
    EXTERNAL_FALLBACK,
    UNBALANCED_STRUCTURE,
    UNSUPPORTED_CONVERSION_PAIR,
    ConversionError,
    ExternalConversionError,
    InvalidInputType,
    UnsupportedFormatError,
)
from .external import ExternalConverter, RegexConverter, get_converter, rtf_to_markdown
from .htmltree import html_to_rtf, html_to_text
from .logging import ConversionLogEntry, RunLogger, StageTimings, elapsed_ms
from .markdown import markdown_to_html, markdown_to_rtf, markdown_to_text
from .models import ConversionResult, DocumentProperties
from .settings import get_settings
from .validation import validate

NativeConverter = Callable[[str, DocumentProperties], str]


def _plain_to_html(text: str, props: DocumentProperties) -> str:
    paragraphs = [block for block in text.replace("\r\n", "\n").replace("\r", "\n").split("\n\n") if block.strip()]
    return "".join(
        "<p>" + "<br>\n".join(html.escape(line) for line in block.split("\n")) + "</p>\n" for block in paragraphs
    )


def _table_to_html(delimiter: str) -> NativeConverter:
    def convert(text: str, props: DocumentProperties) -> str:
        rows = [row for row in csv.reader(StringIO(text.strip()), delimiter=delimiter) if row]
        if not rows:
            return ""
        out = StringIO()
        out.write("<table>\n<thead><tr>")
        out.write("".join(f"<th>{html.escape(cell)}</th>" for cell in rows[0]))
        out.write("</tr></thead>\n<tbody>\n")
        for row in rows[1:]:
            out.write("<tr>" + "".join(f"<td>{html.escape(cell)}</td>" for cell in row) + "</tr>\n")
        out.write("</tbody>\n</table>\n")
        return out.getvalue()

    return convert


_NATIVE: dict[tuple[FormatKind, FormatKind], NativeConverter] = {
    (FormatKind.MARKDOWN, FormatKind.RTF): markdown_to_rtf,
    (FormatKind.MARKDOWN, FormatKind.HTML): lambda text, props: markdown_to_html(
        text, legacy_underline=props.legacy_underline
    ),
    (FormatKind.MARKDOWN, FormatKind.PLAIN): lambda text, props: markdown_to_text(text),
    (FormatKind.HTML, FormatKind.RTF): html_to_rtf,
    (FormatKind.HTML, FormatKind.PLAIN): lambda text, props: html_to_text(text),
    (FormatKind.PLAIN, FormatKind.RTF): wrap_plain_text,
    (FormatKind.PLAIN, FormatKind.HTML): _plain_to_html,
    (FormatKind.PLAIN, FormatKind.MARKDOWN): lambda text, props: text,
    (FormatKind.JSON, FormatKind.RTF): wrap_plain_text,
    (FormatKind.CSV, FormatKind.RTF): wrap_plain_text,
    (FormatKind.TSV, FormatKind.RTF): wrap_plain_text,
    (FormatKind.XML, FormatKind.RTF): wrap_plain_text,
    (FormatKind.CSV, FormatKind.HTML): _table_to_html(","),
    (FormatKind.TSV, FormatKind.HTML): _table_to_html("\t"),
    (FormatKind.RTF, FormatKind.PLAIN): lambda text, props: rtf_to_markdown(text, keep_markup=False),
}


def native_pairs() -> tuple[tuple[FormatKind, FormatKind], ...]:
    return tuple(_NATIVE)


@dataclass(frozen=True, slots=True)
class _Snapshot:
    config: AppConfig
    props: DocumentProperties


class ConversionService:
    """In-memory conversion entry points.

    Every call reads one configuration snapshot, so ``reload`` never changes
    the properties seen by a conversion already in flight.
    """

    def __init__(self, config: AppConfig | None = None, *, logger: RunLogger | None = None) -> None:
        config = config or AppConfig()
        self._snapshot = _Snapshot(config=config, props=config.document_properties())
        if logger is None and config.runtime.log_file is not None:
            logger = RunLogger(config.runtime.log_file)
        self._logger = logger

    @property
    def config(self) -> AppConfig:
        return self._snapshot.config

    @property
    def properties(self) -> DocumentProperties:
        return self._snapshot.props

    def reload(self, config: AppConfig) -> None:
        self._snapshot = _Snapshot(config=config, props=config.document_properties())

    def detect_format(self, text: str | None, *, hint: str | None = None) -> DetectionResult:
        return classify(text, min_confidence=self._snapshot.config.detection.min_confidence, hint=hint)

    def convert(
        self,
        source: FormatKind | str | None,
        target: FormatKind | str,
        text: str,
        *,
        hint: str | None = None,
    ) -> ConversionResult:
        if not isinstance(text, str):
            raise InvalidInputType(text)
        snapshot = self._snapshot
        target_kind = _parse_format(target)
        warnings: list[str] = []
        timings = StageTimings()

        start = time.perf_counter()
        detected = classify(text, min_confidence=snapshot.config.detection.min_confidence, hint=hint)
        if source is None:
            source_kind = detected.kind
            if self._is_ambiguous(text, detected):
                warnings.append(AMBIGUOUS_DETECTION)
        else:
            source_kind = _parse_format(source)
        timings.detect_ms = elapsed_ms(start)

        if source_kind is target_kind or detected.kind is target_kind:
            result = ConversionResult(
                text=text,
                source_format=source_kind,
                target_format=target_kind,
                validated=target_kind is FormatKind.RTF and validate(text).is_valid,
                warnings=warnings,
            )
            self._log(result, timings, len(text), backend=None)
            return result

        start = time.perf_counter()
        backend: str | None = None
        native = _NATIVE.get((source_kind, target_kind))
        soft_failure = False
        if native is not None:
            output = native(text, snapshot.props)
        else:
            warnings.append(UNSUPPORTED_CONVERSION_PAIR)
            output, backend = self._convert_external(snapshot.config, source_kind, target_kind, text, warnings)
            if output is None:
                output = text
                soft_failure = True
        timings.convert_ms = elapsed_ms(start)

        validated = False
        if target_kind is FormatKind.RTF and not soft_failure:
            start = time.perf_counter()
            verdict = validate(output)
            if not verdict.is_valid:
                warnings.append(UNBALANCED_STRUCTURE)
                output = wrap_plain_text(text, snapshot.props)
                verdict = validate(output)
            validated = verdict.is_valid
            timings.validate_ms = elapsed_ms(start)

        result = ConversionResult(
            text=output,
            source_format=source_kind,
            target_format=target_kind,
            validated=validated,
            soft_failure=soft_failure,
            warnings=warnings,
        )
        self._log(result, timings, len(text), backend=backend)
        return result

    def to_rich_text(self, text: str, *, hint: str | None = None) -> str:
        return self.convert(None, FormatKind.RTF, text, hint=hint).text

    def round_trip(self, text: str, via: FormatKind | str) -> ConversionResult:
        """Convert to ``via`` and back to the detected source format."""

        outbound = self.convert(None, via, text)
        inbound = self.convert(outbound.target_format, outbound.source_format, outbound.text)
        inbound.warnings[:0] = outbound.warnings
        inbound.soft_failure = inbound.soft_failure or outbound.soft_failure
        return inbound

    def _is_ambiguous(self, text: str, detected: DetectionResult) -> bool:
        if detected.kind is not FormatKind.PLAIN or detected.confidence == 0.0:
            return False
        return classify(text, min_confidence=0.0).kind is not FormatKind.PLAIN

    def _convert_external(
        self,
        config: AppConfig,
        source: FormatKind,
        target: FormatKind,
        text: str,
        warnings: list[str],
    ) -> tuple[str | None, str | None]:
        names = [config.external.backend]
        if config.external.backend != RegexConverter.name:
            names.append(RegexConverter.name)
        for index, name in enumerate(names):
            try:
                converter: ExternalConverter = get_converter(name)
                output = converter.convert(source, target, text)
            except ExternalConversionError:
                continue
            if index:
                warnings.append(EXTERNAL_FALLBACK)
            return output, name
        return None, None

    def _log(self, result: ConversionResult, timings: StageTimings, input_chars: int, *, backend: str | None) -> None:
        if self._logger is None:
            return
        self._logger.append(
            ConversionLogEntry(
                source_format=result.source_format.value,
                target_format=result.target_format.value,
                status="soft_failure" if result.soft_failure else "success",
                warnings=list(result.warnings),
                error_code=result.warnings[-1] if result.soft_failure and result.warnings else None,
                timings=timings,
                input_chars=input_chars,
                output_chars=len(result.text),
                backend=backend,
            )
        )


def _parse_format(value: FormatKind | str) -> FormatKind:
    try:
        return FormatKind.parse(value)
    except DetectionError as exc:
        raise UnsupportedFormatError(str(exc)) from exc


@lru_cache(maxsize=1)
def get_default_service() -> ConversionService:
    settings = get_settings()
    return ConversionService(apply_settings(load_config(settings.config_path), settings))


def convert(source: FormatKind | str | None, target: FormatKind | str, text: str) -> ConversionResult:
    return get_default_service().convert(source, target, text)


def to_rich_text(text: str, *, hint: str | None = None) -> str:
    return get_default_service().to_rich_text(text, hint=hint)


def detect_format(text: str | None, *, hint: str | None = None) -> DetectionResult:
    return get_default_service().detect_format(text, hint=hint)


__all__ = [
    "ConversionError",
    "ConversionService",
    "ExternalConversionError",
    "InvalidInputType",
    "UnsupportedFormatError",
    "convert",
    "detect_format",
    "get_default_service",
    "native_pairs",
    "to_rich_text",
]
