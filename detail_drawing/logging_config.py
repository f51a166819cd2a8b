"""
Logging setup for the detail_drawing package.

Two output channels share the ``detail_drawing`` logger:

- console: compact human-readable lines, optionally colored
- JSON lines file: one object per record for log collectors

Plus helpers for timing pipeline stages (``log_timing``, ``@timed``) and
for tagging every record in a scope with extra fields (``LogContext``),
which the batch converter uses to stamp records with the drawing name.

Usage:
    from detail_drawing.logging_config import setup_logging, get_logger

    setup_logging(level=logging.INFO, json_file="detail.log.json")
    logger = get_logger(__name__)
    logger.info("Drawing loaded", extra={"shapes": 12})
"""

import json
import logging
import sys
import threading
import time
from contextlib import contextmanager
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar, Union

F = TypeVar('F', bound=Callable[..., Any])

PACKAGE_LOGGER = "detail_drawing"

# Attributes every LogRecord carries; anything else came in via extra={}
_RECORD_ATTRS = frozenset({
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'taskName', 'message', 'asctime',
})


def extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the user-supplied fields of a log record."""
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Always present: timestamp, level, logger, message. Records at DEBUG or
    at WARNING and above also carry their source location. Values that
    cannot be serialized are stored as ``str(value)``.
    """

    def __init__(self, include_extra: bool = True):
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno >= logging.WARNING or record.levelno <= logging.DEBUG:
            entry["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        if self.include_extra:
            for key, value in extra_fields(record).items():
                try:
                    json.dumps(value)
                except (TypeError, ValueError):
                    value = str(value)
                entry[key] = value

        return json.dumps(entry, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """``[HH:MM:SS] LEVEL module: message [key=value, ...]``"""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True, show_extra: bool = True):
        super().__init__()
        self.use_colors = use_colors
        self.show_extra = show_extra

    @staticmethod
    def _short_name(name: str) -> str:
        prefix = PACKAGE_LOGGER + "."
        return name[len(prefix):] if name.startswith(prefix) else name

    @staticmethod
    def _format_value(value: Any) -> str:
        if isinstance(value, float):
            return f"{value:.3g}"
        if isinstance(value, (list, tuple)) and len(value) > 3:
            return f"[...{len(value)} items]"
        return str(value)

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        level = f"{record.levelname:8}"
        if self.use_colors and record.levelname in self.COLORS:
            level = f"{self.COLORS[record.levelname]}{level}{self.RESET}"

        line = f"[{stamp}] {level} {self._short_name(record.name)}: {record.getMessage()}"

        if self.show_extra:
            extras = [f"{k}={self._format_value(v)}" for k, v in extra_fields(record).items()]
            if extras:
                line += " [" + ", ".join(extras) + "]"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: int = logging.INFO,
    json_file: Optional[Union[str, Path]] = None,
    console: bool = True,
    use_colors: bool = True,
    root_logger: bool = False,
) -> logging.Logger:
    """Attach console and/or JSON handlers to the package logger.

    Calling it again replaces the handlers installed previously.

    Args:
        level: Minimum level for the logger and its handlers.
        json_file: Path of a JSON-lines log file, or None.
        console: Log to stderr.
        use_colors: ANSI colors on the console.
        root_logger: Configure the root logger instead of ``detail_drawing``.
    """
    logger = logging.getLogger("" if root_logger else PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console:
        stream = logging.StreamHandler(sys.stderr)
        stream.setLevel(level)
        stream.setFormatter(ConsoleFormatter(use_colors=use_colors))
        logger.addHandler(stream)

    if json_file:
        file_handler = logging.FileHandler(Path(json_file), encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)

    if not root_logger:
        logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


@contextmanager
def log_timing(
    logger: logging.Logger,
    operation: str,
    level: int = logging.DEBUG,
    **fields: Any,
) -> Iterator[Dict[str, Any]]:
    """Log start, completion (with elapsed seconds) or failure of a block.

    The yielded dict can be filled with result figures; they are added
    to the completion record. Exceptions are logged and re-raised.

    Example:
        with log_timing(logger, "auto-dimension", drawing="plate") as info:
            dims = auto_dimension_all(state)
            info["dimensions"] = len(dims)
    """
    info: Dict[str, Any] = {}
    started = time.perf_counter()
    logger.log(level, "Starting: %s", operation,
               extra={"event": "start", "operation": operation, **fields})
    try:
        yield info
    except Exception as exc:
        elapsed = time.perf_counter() - started
        logger.error("Failed: %s (%.3fs) - %s", operation, elapsed, exc, extra={
            "event": "error",
            "operation": operation,
            "elapsed_seconds": elapsed,
            "error": str(exc),
            **fields,
        })
        raise
    elapsed = time.perf_counter() - started
    info['elapsed_seconds'] = elapsed
    logger.log(level, "Completed: %s (%.3fs)", operation, elapsed, extra={
        "event": "complete",
        "operation": operation,
        **fields,
        **info,
    })


def timed(
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG,
    operation: Optional[str] = None,
) -> Callable[[F], F]:
    """Decorator form of :func:`log_timing`.

    Defaults to the decorated function's module logger and name.
    """
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            func_logger = logger or logging.getLogger(func.__module__)
            with log_timing(func_logger, operation or func.__name__, level):
                return func(*args, **kwargs)
        return wrapper  # type: ignore
    return decorator


class _ContextFilter(logging.Filter):
    """Adds fields to records emitted by the thread that entered the context."""

    def __init__(self, fields: Dict[str, Any]):
        super().__init__()
        self.fields = fields
        self.thread = threading.get_ident()

    def filter(self, record: logging.LogRecord) -> bool:
        if record.thread != self.thread:
            return True
        for key, value in self.fields.items():
            setattr(record, key, value)
        return True


class LogContext:
    """Stamp every record of the package logger with fixed fields.

    Example:
        with LogContext(drawing="plate.json"):
            logger.info("Exported")   # record carries drawing="plate.json"

    Contexts nest per thread; ``current()`` sees only the calling thread.
    """

    _local = threading.local()

    def __init__(self, **fields: Any):
        self.fields = fields
        self._filter: Optional[_ContextFilter] = None

    @classmethod
    def _stack(cls) -> list:
        if not hasattr(cls._local, 'stack'):
            cls._local.stack = []
        return cls._local.stack

    def __enter__(self) -> 'LogContext':
        self._stack().append(self)
        self._filter = _ContextFilter(self.fields)
        for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
            handler.addFilter(self._filter)
        logging.getLogger(PACKAGE_LOGGER).addFilter(self._filter)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._filter is not None:
            package_logger = logging.getLogger(PACKAGE_LOGGER)
            package_logger.removeFilter(self._filter)
            for handler in package_logger.handlers:
                handler.removeFilter(self._filter)
        stack = self._stack()
        if stack and stack[-1] is self:
            stack.pop()

    @classmethod
    def current(cls) -> Optional['LogContext']:
        stack = cls._stack()
        return stack[-1] if stack else None


def configure_default_logging(verbose: bool = False) -> logging.Logger:
    """Console logging at DEBUG (verbose) or INFO."""
    return setup_logging(level=logging.DEBUG if verbose else logging.INFO)
