"""
Centralized Logging Service for the catalog relay

Every module asks for its logger through `get_logger(__name__)`. The first
call configures the root logger:

- ``<LOG_DIR>/catalog_relay.json.log``: one JSON object per record
- ``<LOG_DIR>/catalog_relay.log``: plain text
- stdout with colored levels when ENVIRONMENT=development

Both files rotate at 20MB and keep 5 backups. Context goes through
``extra={...}`` and ends up as top-level JSON keys.

Usage:
    from catalog_relay.services.system.logger_service import get_logger

    logger = get_logger(__name__)
    logger.info("Catalog page fetched", extra={"page": 3, "page_entries": 250})
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

LOG_FILE_MAX_BYTES = 20 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Attributes every LogRecord carries; anything else came in through extra={}
_RESERVED_ATTRS = frozenset([
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName',
    'relativeCreated', 'thread', 'threadName', 'exc_info',
    'exc_text', 'stack_info', 'taskName', 'asctime',
])

# Chatty third-party loggers and the level they are capped at
_QUIET_LOGGERS = {
    'urllib3': logging.WARNING,
    'werkzeug': logging.ERROR,
}


def _infer_service(logger_name: str) -> str:
    """catalog_relay.features.catalog.service.x -> "catalog"."""
    parts = logger_name.split('.') if logger_name else []
    for anchor in ('features', 'services'):
        if anchor in parts:
            idx = parts.index(anchor)
            if idx + 1 < len(parts):
                return parts[idx + 1]
    return parts[-1] if parts else 'unknown'


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class JSONFormatter(logging.Formatter):
    """Structured records for the .json.log file."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}:{record.funcName}:{record.lineno}",
            'component': 'catalog_relay',
            'service': _infer_service(record.name),
        }

        for key, value in _extra_fields(record).items():
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = str(value)
            payload[key] = value

        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)

        return json.dumps(payload)


class ConsoleFormatter(logging.Formatter):
    """Colored one-line output, extra fields appended as key=value."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        stamp = datetime.fromtimestamp(record.created, timezone.utc).strftime('%H:%M:%S')

        line = f"{stamp} {color}{record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"
        extras = _extra_fields(record)
        if extras:
            line += '  ' + ' '.join(f"{k}={v}" for k, v in extras.items())
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


class LoggerService:
    """
    Logger service singleton.
    Configures the root logger once per process.
    """

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if LoggerService._initialized:
            return
        self._configure()
        LoggerService._initialized = True

    @staticmethod
    def _rotating(path: Path, formatter: logging.Formatter, level: int) -> RotatingFileHandler:
        handler = RotatingFileHandler(path, maxBytes=LOG_FILE_MAX_BYTES,
                                      backupCount=LOG_FILE_BACKUPS, encoding='utf-8')
        handler.setLevel(level)
        handler.setFormatter(formatter)
        return handler

    def _configure(self):
        log_dir = Path(os.getenv('LOG_DIR') or Path(__file__).resolve().parents[2] / 'logs')
        log_dir.mkdir(parents=True, exist_ok=True)

        level_name = os.getenv('LOG_LEVEL', 'INFO').upper()
        level = getattr(logging, level_name, logging.INFO)
        environment = os.getenv('ENVIRONMENT', 'development').lower()

        root = logging.getLogger()
        root.setLevel(level)
        root.handlers.clear()

        root.addHandler(self._rotating(log_dir / 'catalog_relay.json.log', JSONFormatter(), level))
        root.addHandler(self._rotating(
            log_dir / 'catalog_relay.log',
            logging.Formatter('%(asctime)s [%(levelname)s] [%(name)s] %(message)s', datefmt='%Y-%m-%d %H:%M:%S'),
            level,
        ))

        if environment == 'development':
            console = logging.StreamHandler(sys.stdout)
            console.setLevel(level)
            console.setFormatter(ConsoleFormatter())
            root.addHandler(console)

        for name, quiet_level in _QUIET_LOGGERS.items():
            logging.getLogger(name).setLevel(quiet_level)

        logging.getLogger(__name__).info("Logging initialized", extra={
            'environment': environment,
            'log_level': level_name,
            'log_dir': str(log_dir),
        })


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Configured logger instance
    """
    LoggerService()
    return logging.getLogger(name)


def log_remote_call(logger: logging.Logger, method: str, path: str,
                    status: Optional[int] = None, duration_ms: Optional[float] = None, **kwargs):
    """
    Log one call to the remote catalog API with a consistent shape.

    Args:
        logger: Logger instance
        method: HTTP method
        path: Request path relative to the API base (never the full URL with credentials)
        status: HTTP status code, if a response was received
        duration_ms: Round-trip time
        **kwargs: Additional context
    """
    logger.debug(f"{method} {path}", extra={
        'remote_method': method,
        'remote_path': path,
        'remote_status': status,
        'remote_duration_ms': duration_ms,
        **kwargs,
    })


def log_match_summary(logger: logging.Logger, query_count: int, matched_count: int,
                      catalog_size: int, **kwargs):
    """Log the outcome of one matching run."""
    logger.info("Availability match completed", extra={
        'query_count': query_count,
        'matched_count': matched_count,
        'unmatched_count': query_count - matched_count,
        'catalog_size': catalog_size,
        **kwargs,
    })


def log_error(logger: logging.Logger, error: Exception, context: Optional[Dict[str, Any]] = None):
    """Log an exception with its type, message and traceback."""
    logger.error(f"Error: {error}", extra={
        'error_type': type(error).__name__,
        'error_message': str(error),
        **(context or {}),
    }, exc_info=True)
