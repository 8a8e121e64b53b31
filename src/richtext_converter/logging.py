from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


@dataclass(slots=True)
class StageTimings:
    detect_ms: float = 0.0
    convert_ms: float = 0.0
    validate_ms: float = 0.0


@dataclass(slots=True)
class ConversionLogEntry:
    source_format: str
    target_format: str
    status: str
    warnings: list[str]
    error_code: str | None
    timings: StageTimings
    input_chars: int
    output_chars: int
    backend: str | None = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["timings"] = asdict(self.timings)
        return payload


class RunLogger:
    def __init__(self, log_file: Path) -> None:
        self._log_file = log_file

    @property
    def log_file(self) -> Path:
        return self._log_file

    def append(self, entry: ConversionLogEntry) -> None:
        self._log_file.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(entry.to_dict(), ensure_ascii=False)
        with self._log_file.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")


def elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 3)


__all__ = ["ConversionLogEntry", "RunLogger", "StageTimings", "elapsed_ms"]
