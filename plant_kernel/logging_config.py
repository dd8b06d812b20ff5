"""
Module: plant_kernel.logging_config
Responsibility: One-line JSON log records for every plant service, with the
    request context (who, which screen, which record) merged into each line.
Architecture position: Kernel.  Every other layer logs through
    ``get_logger``; nothing here imports a higher layer.

Record shape::

    {"ts": "...", "level": "INFO", "logger": "plant_kernel.modules.hr.service",
     "message": "time_clock_in", "actor_id": "...", "employee_id": "..."}

Exceptions logged with ``exc_info`` add ``exc_type``, ``exc_message``, the
``PlantOpsError`` ``code`` as ``exc_code``, each public attribute of the
error as ``exc_<name>``, and ``traceback``.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

__all__ = [
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]

_LOGGER_PREFIX = "plant_kernel"

# ---------------------------------------------------------------------------
# Request context
# ---------------------------------------------------------------------------

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"plant_log_{name}", default=None)
    for name in ("correlation_id", "actor_id", "screen", "entity_id")
}


class LogContext:
    """
    Request-scoped fields added to every record on this thread or task.

    ``screen`` names the operator screen (``time_clock``, ``day_close``...)
    and ``entity_id`` the record being worked on.
    """

    FIELDS = tuple(_CONTEXT_VARS)

    @staticmethod
    def set(**fields: str | None) -> None:
        """Update the given fields; ``None`` leaves a field as it is."""
        for name, value in fields.items():
            if value is not None and name in _CONTEXT_VARS:
                _CONTEXT_VARS[name].set(str(value))

    @staticmethod
    def get_all() -> dict[str, str]:
        return {
            name: value
            for name, var in _CONTEXT_VARS.items()
            if (value := var.get()) is not None
        }

    @staticmethod
    def clear() -> None:
        for var in _CONTEXT_VARS.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type[LogContext]]:
        """Set fields for the duration of a ``with`` block, then restore them."""
        tokens = [
            (_CONTEXT_VARS[name], _CONTEXT_VARS[name].set(str(value)))
            for name, value in fields.items()
            if value is not None and name in _CONTEXT_VARS
        ]
        try:
            yield LogContext
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------

_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Renders a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for name, value in vars(record).items():
            if name not in _RESERVED_ATTRS:
                payload.setdefault(name, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger ``plant_kernel.<name>``, e.g. ``get_logger("modules.hr.service")``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_setup_lock = threading.Lock()
_handler_installed = False


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Install the JSON handler on the ``plant_kernel`` logger.

    Only the first call has any effect.  Records do not propagate to the
    root logger, so a host application's handlers never double-print them.
    """
    global _handler_installed
    with _setup_lock:
        if _handler_installed:
            return
        _handler_installed = True

        if handler is None:
            handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())

        plant_logger = logging.getLogger(_LOGGER_PREFIX)
        plant_logger.setLevel(level)
        plant_logger.propagate = False
        plant_logger.addHandler(handler)


def reset_logging() -> None:
    """Remove the installed handler so ``configure_logging`` runs again (tests)."""
    global _handler_installed
    with _setup_lock:
        _handler_installed = False
        plant_logger = logging.getLogger(_LOGGER_PREFIX)
        plant_logger.handlers.clear()
        plant_logger.setLevel(logging.WARNING)
