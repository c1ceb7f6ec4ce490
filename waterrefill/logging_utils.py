"""Logging setup: console formatting plus optional persistence of records."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .config import settings
from .models.system_log import SystemLog

_LOG_RECORD_RESERVED_KEYS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}
_CONSOLE_HANDLER_NAME = "waterrefill-console"


def record_extra(record: logging.LogRecord) -> Dict[str, Any]:
    """Values passed through ``extra=`` that can be stored as JSON."""
    sanitized: Dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key in _LOG_RECORD_RESERVED_KEYS or key.startswith("_"):
            continue
        try:
            json.dumps(value)
            sanitized[key] = value
        except (TypeError, ValueError):
            sanitized[key] = repr(value)
    return sanitized


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["traceback"] = self.formatException(record.exc_info)
        extra = record_extra(record)
        if extra:
            payload["extra"] = extra
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Install a single stderr handler on the root logger."""
    level_name = (level or settings.log_level).upper()
    handler = logging.StreamHandler(sys.stderr)
    if (fmt or settings.log_format).lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))

    handler.set_name(_CONSOLE_HANDLER_NAME)

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == _CONSOLE_HANDLER_NAME:
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))


class _CentralLogHandler(logging.Handler):
    """Logging handler that forwards records into an async queue."""

    def __init__(self, manager: "CentralizedLogManager") -> None:
        super().__init__(manager.level)
        self.manager = manager

    def emit(self, record: logging.LogRecord) -> None:  # noqa: D401 - standard emit signature
        if record.levelno < self.manager.level:
            return
        payload = self.manager.serialize_record(record)
        try:
            self.manager.queue.put_nowait(payload)
        except asyncio.QueueFull:
            self.manager.report_queue_full()


class CentralizedLogManager:
    """Background task that writes log records into the system_logs table."""

    def __init__(
        self,
        service_name: str,
        level: int,
        queue_size: int,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self.service_name = service_name
        self.level = level
        self.session_factory = session_factory
        self.queue: asyncio.Queue[Optional[Dict[str, Any]]] = asyncio.Queue(maxsize=queue_size)
        self._task: Optional[asyncio.Task[None]] = None
        self._queue_warning_emitted = False

    def create_handler(self) -> logging.Handler:
        return _CentralLogHandler(self)

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._worker(), name=f"log-writer-{self.service_name}")

    async def stop(self) -> None:
        """Stop the consumer after flushing queued records."""
        if self._task is None:
            return
        await self.queue.put(None)
        await self._task
        self._task = None
        self._queue_warning_emitted = False

    async def _worker(self) -> None:
        while True:
            item = await self.queue.get()
            if item is None:
                self.queue.task_done()
                break
            try:
                async with self.session_factory() as session:
                    session.add(SystemLog(**item))
                    await session.commit()
            except Exception:  # pragma: no cover - logging must not recurse into itself
                traceback.print_exc()
            finally:
                self.queue.task_done()

    def serialize_record(self, record: logging.LogRecord) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "service": self.service_name,
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
            "created_at": datetime.fromtimestamp(record.created, tz=timezone.utc),
        }

        if record.exc_info:
            payload["traceback"] = "".join(traceback.format_exception(*record.exc_info))
        elif record.exc_text:
            payload["traceback"] = record.exc_text

        extra = record_extra(record)
        if extra:
            payload["extra"] = extra
        return payload

    def report_queue_full(self) -> None:
        """Emit a single warning to stderr if the queue overflows."""
        if self._queue_warning_emitted:
            return
        self._queue_warning_emitted = True
        print(
            f"Log queue for service '{self.service_name}' is full; dropping log entries.",
            file=sys.stderr,
        )


async def enable_centralized_logging(
    service_name: str, session_factory: async_sessionmaker[AsyncSession]
) -> Optional[CentralizedLogManager]:
    """Attach a persisting handler to the root logger when enabled in settings."""
    if not settings.centralized_logging_enabled:
        return None

    level = getattr(logging, settings.centralized_log_level.upper(), logging.WARNING)
    manager = CentralizedLogManager(
        service_name=service_name,
        level=level,
        queue_size=max(1, settings.centralized_log_queue_size),
        session_factory=session_factory,
    )
    handler = manager.create_handler()
    handler.setLevel(level)
    logging.getLogger().addHandler(handler)

    await manager.start()
    return manager


async def disable_centralized_logging(manager: Optional[CentralizedLogManager]) -> None:
    if manager is None:
        return
    await manager.stop()
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if isinstance(handler, _CentralLogHandler) and handler.manager is manager:
            root_logger.removeHandler(handler)
