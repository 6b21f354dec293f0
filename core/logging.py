"""
Logging configuration for the leverage planner.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from loguru import logger
from redis import Redis

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
TRACE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {message}"
FALLBACK_LOG_DIR = Path("/tmp/leverage_planner_logs")

# Lazy import settings to avoid circular dependency
_settings = None


def _get_settings():
    """Get settings with lazy loading."""
    global _settings
    if _settings is None:
        from core.settings.config import settings as app_settings
        _settings = app_settings
    return _settings


def _resolve_log_path(default_path: Path) -> Path:
    try:
        default_path.parent.mkdir(parents=True, exist_ok=True)
        return default_path
    except OSError:
        fallback_dir = Path.cwd() / "logs"
        fallback_dir.mkdir(parents=True, exist_ok=True)
        return fallback_dir / default_path.name


def _add_file_sink(
    path: Path,
    *,
    level: str,
    rotation: str,
    retention: str,
    fmt: str = FILE_FORMAT,
    filter: Optional[Callable[[Dict[str, Any]], Any]] = None,
) -> None:
    """Add a rotating file sink, falling back to a temp dir on permission errors."""
    options = dict(
        format=fmt,
        level=level,
        rotation=rotation,
        retention=retention,
        compression="zip",
        filter=filter,
    )
    try:
        logger.add(str(path), **options)
    except PermissionError:
        FALLBACK_LOG_DIR.mkdir(parents=True, exist_ok=True)
        logger.add(str(FALLBACK_LOG_DIR / path.name), **options)


class RedisLogSink:
    """Loguru sink that writes log records to Redis capped list."""

    def __init__(self, key: str, max_entries: int, client: Optional[Redis] = None) -> None:
        self.key = key
        self.max_entries = max_entries
        try:
            if client is None:
                settings = _get_settings()
                client = Redis(
                    host=settings.redis_host,
                    port=settings.redis_port,
                    db=settings.redis_db,
                    decode_responses=True,
                )
            self.client = client
            # Check connection
            self.client.ping()
            self._available = True
        except Exception as exc:
            logger.warning(f"Redis log sink unavailable: {exc}")
            self._available = False

    def write(self, message: Any) -> None:
        if not self._available:
            return
        try:
            record: Dict[str, Any] = message.record
            payload = {
                "timestamp": record["time"].isoformat(),
                "level": record["level"].name,
                "message": record["message"],
                "name": record["name"],
                "function": record["function"],
                "line": record["line"],
                "extra": record.get("extra", {}),
            }
            self.client.rpush(self.key, json.dumps(payload, default=str))
            self.client.ltrim(self.key, -self.max_entries, -1)
        except Exception as exc:
            # Downgrade to debug to avoid recursive logging
            logger.debug(f"Failed to push log entry to Redis: {exc}")


class LoguruHandler(logging.Handler):
    """Route stdlib logging records (httpx, web3, uvicorn) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


def _is_plan_trace(record: Dict[str, Any]) -> bool:
    return bool(record["extra"].get("PLAN_TRACE"))


def setup_logging():
    """Configure loguru logger with appropriate settings."""
    settings = _get_settings()

    logger.remove()
    logger.configure(extra={"environment": settings.environment})

    log_level = (settings.log_level or "INFO").upper()
    # Allow LOG_LEVEL env override (e.g. debug/trace) used in tests/docker
    env_level = os.getenv("LOG_LEVEL", "").upper()
    if env_level:
        log_level = env_level

    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=log_level,
        colorize=True,
    )

    log_path = _resolve_log_path(Path(settings.log_file))
    _add_file_sink(log_path, level="DEBUG", rotation="100 MB", retention="30 days")
    _add_file_sink(
        _resolve_log_path(log_path.parent / "errors.log"),
        level="ERROR",
        rotation="50 MB",
        retention="90 days",
    )
    # Finished plans, one line each
    _add_file_sink(
        _resolve_log_path(log_path.parent / "plan_traces.log"),
        level="INFO",
        rotation="50 MB",
        retention="365 days",
        fmt=TRACE_FORMAT,
        filter=_is_plan_trace,
    )

    if settings.log_redis_enabled:
        redis_sink = RedisLogSink(settings.log_redis_list_key, settings.log_redis_max_entries)
        logger.add(redis_sink, level="INFO", enqueue=False)

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(LoguruHandler())

    logger.info(f"Logging initialized - Level: {log_level}, File: {log_path}")
    return logger


_log = None


def _get_log():
    """Get or initialize the logger."""
    global _log
    if _log is None:
        try:
            _log = setup_logging()
        except OSError:
            # Unwritable log directories leave the default stderr sink in place
            _log = logger
    return _log


log = _get_log()
