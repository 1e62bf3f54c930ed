"""Structured JSON logging for planhook.

Every record goes to stdout as one JSON object per line and into an
in-memory ring buffer served by ``/debug/logs``. ``EventLog`` is the
narrow interface the webhook path uses; it only emits a fixed vocabulary of
fields so that credentials can never reach the log stream.
"""

import collections
import json
import logging
import sys
from typing import Any

EVENT_FIELDS = (
    "delivery",
    "repo",
    "pr_number",
    "head_sha",
    "plan_id",
    "installation_id",
    "repositories",
    "account",
    "error",
)

_FIELDS_ATTR = "planhook_fields"

log_buffer: collections.deque = collections.deque(maxlen=200)


class JsonFormatter(logging.Formatter):
    """Render a record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        fields = getattr(record, _FIELDS_ATTR, None)
        if fields is not None:
            doc: dict[str, Any] = {"level": record.levelname.lower(), **fields}
        else:
            doc = {
                "level": record.levelname.lower(),
                "msg": record.getMessage(),
                "logger": record.name,
            }
            if record.exc_info:
                doc["error"] = self.formatException(record.exc_info)
        return json.dumps(doc, default=str)


class _BufferHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        log_buffer.append(self.format(record))


def configure_logging(level: str = "INFO", buffer_size: int = 200) -> None:
    """Install the JSON stdout handler and the debug ring buffer on the root logger."""
    global log_buffer
    log_buffer = collections.deque(log_buffer, maxlen=buffer_size)

    formatter = JsonFormatter()
    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(formatter)
    buffered = _BufferHandler()
    buffered.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [stream, buffered]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def recent_logs() -> list[str]:
    return list(log_buffer)


class EventLog:
    """Leveled, structured event records.

    Only keys in ``EVENT_FIELDS`` are kept and ``None`` values are dropped.
    Emitting never raises into the caller.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("planhook.events")

    def info(self, event: str, **fields: Any) -> None:
        self._emit(logging.INFO, "event", event, fields)

    def error(self, msg: str, error: BaseException | str, **fields: Any) -> None:
        self._emit(logging.ERROR, "msg", msg, {**fields, "error": str(error)})

    def _emit(self, level: int, key: str, message: str, fields: dict[str, Any]) -> None:
        try:
            doc = {key: message}
            doc.update(
                (name, fields[name])
                for name in EVENT_FIELDS
                if fields.get(name) is not None
            )
            self._logger.log(level, message, extra={_FIELDS_ATTR: doc})
        except Exception:  # noqa: BLE001 - a lost log line must not fail a delivery
            return
