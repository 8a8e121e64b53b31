from __future__ import annotations

import os
import tempfile
from pathlib import Path

from .detection import FormatKind


SUFFIXES: dict[FormatKind, str] = {
    FormatKind.RTF: ".rtf",
    FormatKind.HTML: ".html",
    FormatKind.MARKDOWN: ".md",
    FormatKind.JSON: ".json",
    FormatKind.CSV: ".csv",
    FormatKind.TSV: ".tsv",
    FormatKind.XML: ".xml",
    FormatKind.PLAIN: ".txt",
}


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("w", delete=False, dir=path.parent, encoding=encoding, newline="") as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.replace(tmp.name, path)


def read_text(path: Path) -> str:
    """Read a source document, falling back to cp1252 for legacy rich-text files."""

    raw = path.read_bytes()
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("cp1252", errors="replace")


def output_path_for(source: Path, target: FormatKind) -> Path:
    return source.with_suffix(SUFFIXES[target])


__all__ = ["SUFFIXES", "atomic_write", "output_path_for", "read_text"]
