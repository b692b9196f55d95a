"""Unified logging configuration for the CLI, sessions and tests.

Provides consistent logging across scripts/paint.py and PaintSession:
    - Console and optional file handler (with size rotation)
    - JSON output mode for ingestion
    - Contextual fields (app, submission, layer count)
    - Warning capture (Python warnings → logging)

Public API:
    setup_logging(log_level="INFO", context={"app": "paint"})
    get_logger(name)
    push_context(submission=3)
    pop_context(keys=["submission"])

Format examples:
    Human: 2025-10-28T13:45:12.345Z | INFO     | app=paint submission=3 | Composited 128 layers
    JSON: {"t":"2025-10-28T13:45:12.345000+00:00","lvl":"INFO","submission":3,"msg":"..."}

Context uses contextvars, so a worker thread only sees the fields it pushed.
Idempotent: repeated setup_logging() calls don't duplicate handlers.
"""

import contextvars
import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


_context_var = contextvars.ContextVar('logging_context', default={})

_configured = False


class ContextFormatter(logging.Formatter):
    """Formatter that appends fields from push_context().

    Supports a human-readable mode (optionally colored) and a JSON-lines mode.
    """

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, fmt_mode: str = "human", use_color: bool = True):
        super().__init__()
        if fmt_mode not in ("human", "json"):
            raise ValueError(f"Unknown format mode: {fmt_mode}. Use 'human' or 'json'.")
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        context = _context_var.get({})
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if self.fmt_mode == "json":
            return self._format_json(record, ts, context)
        return self._format_human(record, ts, context)

    def _format_json(self, record: logging.LogRecord, ts: datetime, context: dict) -> str:
        log_dict = {
            't': ts.isoformat(),
            'lvl': record.levelname,
            'name': record.name,
            'pid': os.getpid(),
            'msg': record.getMessage(),
        }
        log_dict.update(context)
        if record.exc_info:
            log_dict['exc'] = self.formatException(record.exc_info)
        return json.dumps(log_dict, default=str)

    def _format_human(self, record: logging.LogRecord, ts: datetime, context: dict) -> str:
        ts_str = ts.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'

        level = f"{record.levelname:8s}"
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        parts = [ts_str, '|', level, '|']
        context_str = ' '.join(f"{k}={v}" for k, v in context.items())
        if context_str:
            parts.extend([context_str, '|'])
        parts.append(record.getMessage())

        line = ' '.join(parts)
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    max_bytes: Optional[int] = None,
    backup_count: int = 3,
    capture_warnings: bool = True,
    quiet_libs: Optional[List[str]] = None,
    context: Optional[Dict[str, Any]] = None,
) -> List[logging.Handler]:
    """Configure the root logger (idempotent).

    Parameters
    ----------
    log_level : str
        "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL"
    log_file : str, optional
        Log file path; None disables file logging
    json : bool
        Emit JSON lines instead of human-readable lines, default False
    color : bool
        Use ANSI colors on a TTY console, default True
    to_stderr : bool
        Log to stderr, default True
    max_bytes : int, optional
        Rotate the log file once it reaches this size
    backup_count : int
        Rotated files to keep, default 3
    capture_warnings : bool
        Route Python warnings into logging, default True
    quiet_libs : list[str], optional
        Library loggers forced to WARNING (e.g. ["PIL"])
    context : dict, optional
        Initial contextual fields (e.g. {"app": "paint"})

    Returns
    -------
    list[logging.Handler]
        Handlers attached to the root logger
    """
    global _configured

    root = logging.getLogger()
    if _configured:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()

    root.setLevel(getattr(logging, log_level.upper()))

    handlers: List[logging.Handler] = []
    if to_stderr:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(ContextFormatter("json" if json else "human", color))
        handlers.append(console_handler)

    if log_file:
        handlers.append(_create_file_handler(log_file, json, max_bytes, backup_count))

    for handler in handlers:
        root.addHandler(handler)

    if context:
        push_context(**context)

    for lib in quiet_libs or []:
        logging.getLogger(lib).setLevel(logging.WARNING)

    if capture_warnings:
        logging.captureWarnings(True)

    _configured = True
    return handlers


def _create_file_handler(
    log_file: str,
    json_format: bool,
    max_bytes: Optional[int],
    backup_count: int
) -> logging.Handler:
    """Create a (possibly rotating) file handler, creating parent dirs."""
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    if max_bytes:
        handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count
        )
    else:
        handler = logging.FileHandler(log_path)

    handler.setFormatter(ContextFormatter("json" if json_format else "human", use_color=False))
    return handler


def get_logger(name: str) -> logging.Logger:
    """Get logger by name (typically __name__)."""
    return logging.getLogger(name)


def push_context(**kwargs) -> None:
    """Add contextual fields to all subsequent log records of this context.

    Examples
    --------
    >>> push_context(app="paint")
    >>> push_context(submission=3)
    >>> logger.info("Queued")  # → "... | app=paint submission=3 | Queued"
    """
    current = _context_var.get({})
    _context_var.set({**current, **kwargs})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Remove contextual fields; all of them when keys is None."""
    if keys is None:
        _context_var.set({})
        return
    current = dict(_context_var.get({}))
    for key in keys:
        current.pop(key, None)
    _context_var.set(current)


def get_context() -> Dict[str, Any]:
    """Return a copy of the current contextual fields."""
    return dict(_context_var.get({}))
