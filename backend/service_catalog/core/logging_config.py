"""
Centralized logging configuration for the Service Catalog.

Log records carry structured data in ``extra={"context": {...}}``. On top of
that, the code handling one inbound event or one API request binds a
correlation context (source, routing key, event id or request id) that is
merged into every record emitted while it is active, so all lines about
one event can be found together.

Usage:
    from service_catalog.core.logging_config import bind_log_context, setup_logging

    setup_logging(app, log_level="INFO")

    with bind_log_context(source="barber", event_id=7):
        logger.info("Barber event applied", extra={"context": {"published": 2}})
"""

import json
import logging
import logging.handlers
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from flask import Flask, g, request
from sqlalchemy import event
from sqlalchemy.engine import Engine

LOG_DIR = Path(__file__).resolve().parents[2] / "logs"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

_correlation: ContextVar[Dict[str, Any]] = ContextVar("log_correlation", default={})
_sql_timing_registered = False


@contextmanager
def bind_log_context(**values: Any) -> Iterator[Dict[str, Any]]:
    """Merge ``values`` into the correlation context for the enclosed block."""
    merged = {**_correlation.get(), **{k: v for k, v in values.items() if v is not None}}
    token = _correlation.set(merged)
    try:
        yield merged
    finally:
        _correlation.reset(token)


def current_log_context() -> Dict[str, Any]:
    return dict(_correlation.get())


def _record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Correlation context first, then the record's own ``context`` on top."""
    context = current_log_context()
    own = getattr(record, "context", None)
    if isinstance(own, dict):
        context.update(own)
    return context


class JSONFormatter(logging.Formatter):
    """One JSON object per line; used for files and for production consoles."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        context = _record_context(record)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Coloured single-line format for local development."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self) -> None:
        super().__init__("%(asctime)s | %(levelname)s | %(name)s | %(message)s", "%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        # Copy, other handlers must still see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno, "")
        record.levelname = f"{color}{record.levelname:8}{self.RESET if color else ''}"
        line = super().format(record)
        context = _record_context(record)
        if context:
            line += " | " + " ".join(f"{k}={v}" for k, v in context.items())
        return line


def _register_sql_timing() -> None:
    """Debug-log every statement with its duration (SQL_ECHO)."""
    global _sql_timing_registered
    if _sql_timing_registered:
        return
    sql_logger = logging.getLogger("service_catalog.sql")

    @event.listens_for(Engine, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("statement_started", []).append(time.perf_counter())

    @event.listens_for(Engine, "after_cursor_execute")
    def _log_statement(conn, cursor, statement, parameters, context, executemany):
        elapsed_ms = (time.perf_counter() - conn.info["statement_started"].pop()) * 1000
        sql_logger.debug(
            f"SQL {elapsed_ms:.2f}ms",
            extra={"context": {"statement": statement[:300], "duration_ms": round(elapsed_ms, 2)}},
        )

    _sql_timing_registered = True


def _register_request_logging(app: Flask) -> None:
    """Bind a request id for the admin API and log each request once it completes."""
    request_logger = logging.getLogger("service_catalog.api")

    @app.before_request
    def _bind_request():
        g.request_started = time.perf_counter()
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        g.log_token = _correlation.set({**_correlation.get(), "request_id": g.request_id})

    @app.after_request
    def _log_request(response):
        if "request_started" in g:
            elapsed_ms = (time.perf_counter() - g.request_started) * 1000
            request_logger.info(
                f"{request.method} {request.path} -> {response.status_code}",
                extra={
                    "context": {
                        "status_code": response.status_code,
                        "duration_ms": round(elapsed_ms, 2),
                    }
                },
            )
            response.headers.setdefault("X-Request-ID", g.request_id)
        return response

    @app.teardown_request
    def _unbind_request(exc):
        token = g.pop("log_token", None)
        if token is not None:
            _correlation.reset(token)


def _build_handlers(
    level: int, log_to_file: bool, use_json_format: bool, warnings: List[str]
) -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(JSONFormatter() if use_json_format else ConsoleFormatter())
    handlers: List[logging.Handler] = [console]
    if not log_to_file:
        return handlers

    try:
        LOG_DIR.mkdir(exist_ok=True)
    except OSError as e:
        warnings.append(f"Cannot create {LOG_DIR} ({e}), logging to console only")
        return handlers

    # Files are always JSON; the errors file isolates what needs attention
    for filename, file_level in (("service_catalog.log", level), ("service_catalog_errors.log", logging.ERROR)):
        try:
            handler = logging.handlers.RotatingFileHandler(
                LOG_DIR / filename, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
            )
        except OSError as e:
            warnings.append(f"Cannot open {filename} ({e}), skipping it")
            continue
        handler.setLevel(file_level)
        handler.setFormatter(JSONFormatter())
        handlers.append(handler)
    return handlers


def setup_logging(
    app: Optional[Flask] = None,
    log_level: Union[int, str] = "INFO",
    enable_sql_echo: bool = False,
    log_to_file: bool = True,
    use_json_format: bool = False,
) -> None:
    """
    Configure the root logger for the API and the event consumer.

    Args:
        app: Flask application; when given, request ids are bound and requests logged
        log_level: Logging level (int like logging.INFO or string "INFO")
        enable_sql_echo: Log SQL statements with their duration
        log_to_file: Also write rotating JSON log files under ``logs/``
        use_json_format: JSON instead of coloured console output
    """
    level = log_level if isinstance(log_level, int) else logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    warnings: List[str] = []
    for handler in _build_handlers(level, log_to_file, use_json_format, warnings):
        root_logger.addHandler(handler)
    for message in warnings:
        root_logger.warning(message, extra={"context": {"component": "logging_setup"}})

    if enable_sql_echo:
        _register_sql_timing()
    if app is not None:
        _register_request_logging(app)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("service_catalog").debug(
        "Logging configured",
        extra={
            "context": {
                "level": logging.getLevelName(level),
                "sql_echo": enable_sql_echo,
                "files": len(root_logger.handlers) - 1,
                "json": use_json_format,
            }
        },
    )


def log_performance(func_name: str, duration_ms: float, **kwargs) -> None:
    """
    Log how long an operation took.

    Args:
        func_name: Name of the operation (e.g. handle_barber_event)
        duration_ms: Execution duration in milliseconds
        **kwargs: Additional context (outcome, attempts, ...)
    """
    logging.getLogger("service_catalog.performance").info(
        f"{func_name} completed in {duration_ms:.2f}ms",
        extra={"context": {"operation": func_name, "duration_ms": round(duration_ms, 2), **kwargs}},
    )
