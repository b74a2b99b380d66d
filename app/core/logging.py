"""Structured logging for the dashboard API.

One handler on the root logger, set up by :func:`configure_logging`:

- every record carries the current request id (kept in a ContextVar by the
  request middleware);
- credentials never reach the output: structured fields named like a secret
  are replaced, and session tokens or API keys that end up inside free text
  are masked;
- output is one JSON object per line (or a plain format for local use), on
  stdout or a size-rotated file.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging import LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping

from app.core.config import LogSettings, settings

REDACTED = "[REDACTED]"

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

# Field names whose values are always replaced (compared lower-cased)
SENSITIVE_KEYS_DEFAULT: frozenset[str] = frozenset(
    {
        "password",
        "demo_password",
        "app_demo_password",
        "token",
        "access_token",
        "refresh_token",
        "authorization",
        "api_key",
        "x-api-key",
        "key",
        "raw_key",
        "secret",
        "cookie",
        "set-cookie",
    }
)

# Session tokens (tok_/ref_) and API keys (sk_live_/sk_test_/sk_read_) in free text
SECRET_VALUE_PATTERN = re.compile(r"\b(?:tok|ref)_[A-Za-z0-9_\-]{8,}|\bsk_[a-z]+_[A-Za-z0-9_\-]{8,}")

# Attributes every LogRecord has; anything else came in through ``extra=``
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime", "taskName"}


def set_request_id(request_id: str | None) -> None:
    _request_id_var.set(request_id)


def get_request_id() -> str | None:
    return _request_id_var.get()


def clear_request_id() -> None:
    _request_id_var.set(None)


def mask_secrets(text: str) -> str:
    """Replace anything shaped like a session token or API key in ``text``."""
    return SECRET_VALUE_PATTERN.sub(REDACTED, text)


def redact(value: Any, sensitive_keys: frozenset[str] = SENSITIVE_KEYS_DEFAULT) -> Any:
    """Return ``value`` with secrets removed, walking mappings and sequences.

    Mapping entries whose key is sensitive are replaced wholesale; strings
    anywhere in the structure go through :func:`mask_secrets`.
    """
    if isinstance(value, Mapping):
        return {
            k: REDACTED if str(k).lower() in sensitive_keys else redact(v, sensitive_keys)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(redact(v, sensitive_keys) for v in value)
    if isinstance(value, str):
        return mask_secrets(value)
    return value


def record_extras(record: LogRecord, sensitive_keys: frozenset[str] = SENSITIVE_KEYS_DEFAULT) -> dict[str, Any]:
    """The ``extra=`` fields of ``record``, redacted."""
    return {
        key: REDACTED if key.lower() in sensitive_keys else redact(value, sensitive_keys)
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class RequestIdFilter(logging.Filter):
    """Attach request_id from context when absent on the record."""

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        if getattr(record, "request_id", None) is None:
            request_id = get_request_id()
            if request_id:
                record.request_id = request_id
        return True


class SensitiveDataFilter(logging.Filter):
    """Redact secrets on the record itself, so every formatter sees clean data."""

    def __init__(self, sensitive_keys: Iterable[str] | None = None) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(k.lower() for k in (sensitive_keys or SENSITIVE_KEYS_DEFAULT))

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        for key, value in record_extras(record, self.sensitive_keys).items():
            setattr(record, key, value)
        if isinstance(record.msg, str):
            record.msg = mask_secrets(record.msg)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, message, extras."""

    def __init__(
        self,
        *,
        sensitive_keys: Iterable[str] | None = None,
        ensure_ascii: bool = True,
    ) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(k.lower() for k in (sensitive_keys or SENSITIVE_KEYS_DEFAULT))
        self.ensure_ascii = ensure_ascii

    def format(self, record: LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": mask_secrets(record.getMessage()),
        }

        request_id = getattr(record, "request_id", None) or get_request_id()
        if request_id:
            payload["request_id"] = request_id

        payload.update(record_extras(record, self.sensitive_keys))

        if record.exc_info:
            payload["exception"] = mask_secrets(self.formatException(record.exc_info))

        return json.dumps(payload, default=str, ensure_ascii=self.ensure_ascii)


def _build_handler(log_settings: LogSettings) -> logging.Handler:
    if log_settings.output.lower() != "file":
        return logging.StreamHandler(sys.stdout)

    file_path = Path(log_settings.file_path or "logs/app.log")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if not log_settings.max_bytes:
        return logging.FileHandler(file_path, encoding="utf-8")
    return RotatingFileHandler(
        file_path,
        maxBytes=log_settings.max_bytes,
        backupCount=log_settings.backup_count,
        encoding="utf-8",
    )


def configure_logging(log_settings: LogSettings | None = None, *, debug: bool | None = None) -> None:
    """Install the redacting handler on the root logger.

    Replaces any handlers already on the root logger, so calling it once per
    app instance is safe.

    Args:
        log_settings: Output settings; defaults to ``settings.log``.
        debug: Force DEBUG level; defaults to ``APP_DEBUG``.
    """
    cfg = log_settings or settings.log
    if debug is None:
        debug = settings.app.debug

    handler = _build_handler(cfg)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())

    if cfg.format.lower() == "plain":
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG if debug else getattr(logging, cfg.level.upper(), logging.INFO))

    # uvicorn installs its own handlers; keep its lines from appearing twice
    logging.getLogger("uvicorn").propagate = False
    logging.getLogger("uvicorn.access").propagate = False
