"""Structured logging for the practice engine and its CLI."""

from __future__ import annotations

import json
import logging
import sys
import tempfile
from datetime import datetime, timezone
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

__all__ = [
    "ROOT_LOGGER",
    "JsonLogFormatter",
    "component_logger",
    "configure_logger",
]

ROOT_LOGGER = "exam_drill"

# Attributes every LogRecord carries; anything else arrived via ``extra``.
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}

_FILE_MARKER = "_exam_drill_file"
_CONSOLE_MARKER = "_exam_drill_console"


class JsonLogFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "component": _component_name(record.name),
            "message": record.getMessage(),
        }
        extras = {
            key: _jsonable(value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        }
        if extras:
            payload["extra"] = extras
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info
        return json.dumps(payload, ensure_ascii=False)


def component_logger(
    component: str, logger: logging.Logger | None = None
) -> logging.Logger:
    """Return ``logger`` or the namespaced child logger for ``component``."""

    if logger is not None:
        return logger
    return logging.getLogger(f"{ROOT_LOGGER}.{component}")


def configure_logger(
    *,
    log_dir: Path,
    level: str = "INFO",
    verbose: bool = False,
    name: str = ROOT_LOGGER,
    filename: str = "drill.log",
    max_bytes: int = 2 * 1024 * 1024,
    backup_count: int = 3,
) -> tuple[logging.Logger, Path]:
    """Attach a JSON rotating file handler to ``name`` and return it.

    Engine components log through children of the root logger, so one call
    here captures the gateway, the session and the timer alike. Repeated
    calls reuse the managed handlers instead of stacking new ones.
    """

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    handler, path = _file_handler(
        logger, log_dir, filename, max_bytes, backup_count
    )
    handler.setLevel(logging.DEBUG if verbose else _level_from_name(level))

    console = _find_handler(logger, _CONSOLE_MARKER)
    if verbose and console is None:
        console = logging.StreamHandler(stream=sys.stderr)
        console.setFormatter(
            logging.Formatter("%(levelname)s %(name)s: %(message)s")
        )
        setattr(console, _CONSOLE_MARKER, True)
        logger.addHandler(console)
    elif not verbose and console is not None:
        logger.removeHandler(console)
        console.close()
    return logger, path


def _file_handler(
    logger: logging.Logger,
    log_dir: Path,
    filename: str,
    max_bytes: int,
    backup_count: int,
) -> tuple[logging.Handler, Path]:
    existing = _find_handler(logger, _FILE_MARKER)
    if existing is not None:
        path = Path(existing.baseFilename)  # type: ignore[attr-defined]
        return existing, path

    for directory in (log_dir, _fallback_log_dir()):
        path = directory / filename
        try:
            directory.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(
                path,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        except PermissionError:
            continue
        _restrict(path, 0o600)
        handler.setFormatter(JsonLogFormatter())
        setattr(handler, _FILE_MARKER, True)
        logger.addHandler(handler)
        return handler, path
    raise PermissionError(f"No writable log directory for {filename}")


def _find_handler(
    logger: logging.Logger, marker: str
) -> logging.Handler | None:
    for handler in logger.handlers:
        if getattr(handler, marker, False):
            return handler
    return None


def _level_from_name(level: str) -> int:
    numeric = logging.getLevelName(level.upper())
    return numeric if isinstance(numeric, int) else logging.INFO


def _component_name(logger_name: str) -> str:
    prefix = ROOT_LOGGER + "."
    if logger_name.startswith(prefix):
        return logger_name[len(prefix):]
    return logger_name


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(item) for item in value]
    return repr(value)


def _restrict(path: Path, mode: int) -> None:
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass


def _fallback_log_dir() -> Path:
    return Path(tempfile.gettempdir()) / "exam-drill-logs"
