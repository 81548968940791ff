"""
Logging setup for pipeline runs.

Records carry the run context (batch id, theme, seed URL) through a
context variable, so worker threads started with `copy_context()` tag
their records with the seed they are processing. The JSONL file handler
writes that context next to the explicit `log_event` fields.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
import re
from typing import Any, Iterator

from rich.logging import RichHandler

from ..config import LoggingConfig


_URL_RE = re.compile(r"https?://\S+")

_RUN_CONTEXT: ContextVar[dict[str, Any]] = ContextVar("newzcomp_run_context", default={})


@contextmanager
def log_context(**fields: Any) -> Iterator[dict[str, Any]]:
    """Add fields to every record logged inside the block.

    Nested blocks extend the outer context; None values are dropped.

    Examples:
        >>> with log_context(batch_id="b1"):
        ...     with log_context(theme="World"):
        ...         current_log_context()
        {'batch_id': 'b1', 'theme': 'World'}
    """
    merged = {**_RUN_CONTEXT.get(), **{k: v for k, v in fields.items() if v is not None}}
    token = _RUN_CONTEXT.set(merged)
    try:
        yield merged
    finally:
        _RUN_CONTEXT.reset(token)


def current_log_context() -> dict[str, Any]:
    return dict(_RUN_CONTEXT.get())


class RunContextFilter(logging.Filter):
    """Copy the active run context onto records without overriding explicit fields."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _RUN_CONTEXT.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def setup_logging(cfg: LoggingConfig, run_output_dir: Path | None) -> logging.Logger:
    logger = logging.getLogger("newzcomp")
    logger.setLevel(_level_from_string(cfg.level))
    _reset_handlers(logger)
    logger.propagate = False

    if cfg.console:
        console_handler = RichHandler(rich_tracebacks=True, show_time=False, show_level=True)
        console_handler.setLevel(_level_from_string(cfg.level))
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(console_handler)

    if cfg.file and run_output_dir is not None:
        run_output_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(run_output_dir / cfg.filename, encoding="utf-8")
        file_handler.setLevel(_level_from_string(cfg.level))
        file_handler.setFormatter(_build_file_formatter(cfg.format))
        file_handler.addFilter(RunContextFilter())
        logger.addHandler(file_handler)

    return logger


def setup_llm_logger(cfg: LoggingConfig, run_output_dir: Path | None) -> logging.Logger | None:
    """Dedicated JSONL log of prompts and responses, kept out of the run log."""
    if not cfg.llm_log_enabled or run_output_dir is None:
        return None

    logger = logging.getLogger("newzcomp.llm")
    logger.setLevel(_level_from_string(cfg.level))
    _reset_handlers(logger)
    logger.propagate = False

    run_output_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(run_output_dir / cfg.llm_log_file, encoding="utf-8")
    file_handler.setLevel(_level_from_string(cfg.level))
    file_handler.setFormatter(JsonlFormatter())
    file_handler.addFilter(RunContextFilter())
    logger.addHandler(file_handler)
    return logger


def log_event(logger: logging.Logger | None, message: str, level: int = logging.INFO, **fields: Any) -> None:
    if logger is None:
        return
    logger.log(level, message, extra=fields)


def redact_text(text: str, mode: str) -> str:
    if mode == "none":
        return text
    if mode == "redact_content":
        return ""
    if mode == "redact_urls_authors":
        return _URL_RE.sub("[REDACTED_URL]", text)
    return text


def truncate_text(text: str, max_chars: int = 20000) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "...(truncated)"


class JsonlFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extract_extras(record))
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


class _ContextTextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = " ".join(
            f"{key}={getattr(record, key)}" for key in ("batch_id", "theme", "url") if hasattr(record, key)
        )
        return f"{line} [{context}]" if context else line


_RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _extract_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in record.__dict__.items() if key not in _RESERVED}


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _build_file_formatter(fmt: str) -> logging.Formatter:
    if fmt == "jsonl":
        return JsonlFormatter()
    return _ContextTextFormatter("%(asctime)s %(levelname)s %(message)s")


def _level_from_string(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)
