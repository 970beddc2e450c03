import contextvars
import logging
import os
import sys
import time
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

_correlation_id: contextvars.ContextVar[str] = contextvars.ContextVar("correlation_id", default="-")


def get_correlation_id() -> str:
    return _correlation_id.get()


@contextmanager
def bind_correlation_id(correlation_id: Optional[str] = None) -> Iterator[str]:
    """Tag every log record emitted inside the block with a correlation id."""
    cid = correlation_id or uuid.uuid4().hex[:12]
    token = _correlation_id.set(cid)
    try:
        yield cid
    finally:
        _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Stamp record.correlation_id so formatters can always reference it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = _correlation_id.get()
        return True


@contextmanager
def log_stage(logger: logging.Logger, stage: str, **fields) -> Iterator[None]:
    """
    Log the start, duration and outcome of one pipeline stage.

    Exceptions are logged and re-raised; the caller decides how to degrade.
    """
    detail = " ".join(f"{k}={v}" for k, v in fields.items())
    logger.info("[%s] start %s", stage, detail)
    start = time.monotonic()
    try:
        yield
    except Exception as e:
        elapsed = (time.monotonic() - start) * 1000
        logger.warning("[%s] failed after %.1fms: %s", stage, elapsed, e)
        raise
    elapsed = (time.monotonic() - start) * 1000
    logger.info("[%s] done in %.1fms", stage, elapsed)


class ColoredFormatter(logging.Formatter):
    """Custom formatter to add colors to console output."""

    blue = "\x1b[38;5;39m"
    cyan = "\x1b[36m"
    green = "\x1b[32m"
    yellow = "\x1b[33m"
    red = "\x1b[31m"
    bold_red = "\x1b[31;1m"
    reset = "\x1b[0m"

    format_str = "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s:%(lineno)d - %(message)s"

    FORMATS = {
        logging.DEBUG: cyan + format_str + reset,
        logging.INFO: green + format_str + reset,
        logging.WARNING: yellow + format_str + reset,
        logging.ERROR: red + format_str + reset,
        logging.CRITICAL: bold_red + format_str + reset
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno)
        # Handle cases where level might be outside standard range
        if not log_fmt:
            log_fmt = self.format_str
        if not hasattr(record, "correlation_id"):
            record.correlation_id = _correlation_id.get()
        formatter = logging.Formatter(log_fmt, datefmt="%Y-%m-%d %H:%M:%S")
        return formatter.format(record)


def resolve_level(name) -> int:
    """Map a level name such as "debug" to its number; unknown names give INFO."""
    level = logging.getLevelName(str(name).strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level=logging.INFO, log_dir: Optional[str] = "logs"):
    """Setup centralized logging configuration."""
    root_logger = logging.getLogger()

    # Clear existing handlers to prevent duplicate logs
    if root_logger.handlers:
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

    root_logger.setLevel(level)
    correlation_filter = CorrelationIdFilter()

    # 1. Console handler (using stderr for uvicorn compatibility)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ColoredFormatter())
    console_handler.addFilter(correlation_filter)
    root_logger.addHandler(console_handler)

    # 2. File handler for persistence
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(
            os.path.join(log_dir, f"bugscope_{datetime.now().strftime('%Y%m%d')}.log")
        )
        file_fmt = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        file_handler.setFormatter(file_fmt)
        file_handler.addFilter(correlation_filter)
        root_logger.addHandler(file_handler)

    # Force propagation for all relevant internal loggers
    for logger_name in ["bugscope", "uvicorn", "uvicorn.error", "uvicorn.access", "main"]:
        l = logging.getLogger(logger_name)
        l.setLevel(level)
        l.propagate = True

    root_logger.info("Logging initialized (console + file, correlation ids).")
