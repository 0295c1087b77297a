"""Structured logging and observability helpers."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from bootimg.errors import OutputWriteError

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass(slots=True)
class StructuredLogger:
    """Collects pipeline records and mirrors each one to a stdlib logger."""

    records: list[dict[str, Any]] = field(default_factory=list)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("bootimg"))

    def log(
        self,
        *,
        operation: str,
        phase: str | None,
        message: str,
        level: str = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "phase": phase,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)
        self.logger.log(_LEVELS.get(level, logging.INFO), message)

    def debug(self, operation: str, message: str, *, phase: str | None = None, **extra: Any) -> None:
        self.log(operation=operation, phase=phase, message=message, level="debug", extra=extra or None)

    def info(self, operation: str, message: str, *, phase: str | None = None, **extra: Any) -> None:
        self.log(operation=operation, phase=phase, message=message, extra=extra or None)

    def warning(self, operation: str, message: str, *, phase: str | None = None, **extra: Any) -> None:
        self.log(operation=operation, phase=phase, message=message, level="warning", extra=extra or None)

    def error(self, operation: str, message: str, *, phase: str | None = None, **extra: Any) -> None:
        self.log(operation=operation, phase=phase, message=message, level="error", extra=extra or None)

    def records_for_phase(self, phase: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("phase") == phase]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        lines = [json.dumps(record, sort_keys=True, default=str) for record in self.records]
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError as exc:
            raise OutputWriteError(
                "Could not write log records.",
                hint=str(exc),
                context={"path": str(output_path)},
            ) from exc
        return output_path


def configure_logging(*, verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )
