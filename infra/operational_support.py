from __future__ import annotations

import json
import logging
import os
import re
import sys
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Iterator, Mapping

from infra.path import user_data_dir
from infra.version import get_app_version

REDACTED = "<redacted>"
REDACTED_PHONE = "<redacted-phone>"

_TRACE_ID_CTX: ContextVar[str | None] = ContextVar("siteledger_trace_id", default=None)
_SENSITIVE_KEY_PARTS = (
    "password",
    "token",
    "secret",
    "api_key",
    "authorization",
    "phone",
    "national_id",
    "bank_account",
    "iban",
)
# Yemeni mobile numbers (+967 / 00967 / local 7xxxxxxxx) appear in worker and recipient notes.
_PHONE_PATTERN = re.compile(r"(?:\+|00)?967[\s-]?\d{7,9}\b|\b7\d{8}\b")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_trace_id(prefix: str = "rpt") -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"{prefix}-{stamp}-{uuid.uuid4().hex[:8]}"


def current_trace_id() -> str | None:
    value = _TRACE_ID_CTX.get()
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


@contextmanager
def bind_trace_id(trace_id: str | None = None) -> Iterator[str]:
    normalized = (trace_id or "").strip() or create_trace_id()
    token = _TRACE_ID_CTX.set(normalized)
    try:
        yield normalized
    finally:
        _TRACE_ID_CTX.reset(token)


def _is_sensitive_key(value: object) -> bool:
    key = str(value or "").strip().lower().replace("-", "_")
    return any(part in key for part in _SENSITIVE_KEY_PARTS)


def redact_text(value: str) -> str:
    return _PHONE_PATTERN.sub(REDACTED_PHONE, str(value or ""))


def redact_value(value: Any, *, _depth: int = 0, _max_depth: int = 6) -> Any:
    if _depth >= _max_depth:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, Mapping):
        out: dict[str, Any] = {}
        for key, item in value.items():
            key_text = str(key)
            if _is_sensitive_key(key_text):
                out[key_text] = REDACTED
            else:
                out[key_text] = redact_value(item, _depth=_depth + 1, _max_depth=_max_depth)
        return out
    if isinstance(value, (list, tuple)):
        return [redact_value(item, _depth=_depth + 1, _max_depth=_max_depth) for item in value]
    return redact_text(str(value))


class TraceIdLogFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = current_trace_id() or "-"
        return True


class OperationalSupport:
    """Append-only JSONL record of report requests and failures."""

    def __init__(self, events_path: str | Path | None = None) -> None:
        if events_path is None:
            events_path = user_data_dir() / "logs" / "support-events.jsonl"
        self._events_path = Path(events_path)
        self._events_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()

    @property
    def events_path(self) -> Path:
        return self._events_path

    def emit_event(
        self,
        *,
        event_type: str,
        message: str,
        level: str = "INFO",
        trace_id: str | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> str:
        normalized_type = (event_type or "").strip() or "support.event"
        resolved_trace = (trace_id or current_trace_id() or create_trace_id()).strip()

        payload: dict[str, Any] = {
            "timestamp_utc": _utc_now_iso(),
            "event_type": normalized_type,
            "level": (level or "INFO").strip().upper(),
            "trace_id": resolved_trace,
            "message": redact_text(message or ""),
            "app_version": get_app_version(),
            "pid": os.getpid(),
        }
        if data:
            payload["data"] = redact_value(dict(data))

        line = json.dumps(payload, ensure_ascii=False, sort_keys=True)
        with self._lock:
            with self._events_path.open("a", encoding="utf-8") as handle:
                handle.write(line)
                handle.write("\n")
        return resolved_trace

    def capture_exception(
        self,
        *,
        exc_value: BaseException,
        context: str,
        trace_id: str | None = None,
    ) -> str:
        stack = "".join(traceback.format_exception(type(exc_value), exc_value, exc_value.__traceback__))
        return self.emit_event(
            event_type="app.crash",
            level="ERROR",
            trace_id=trace_id,
            message=f"Unhandled exception in {context}: {exc_value}",
            data={
                "context": context,
                "exception_type": type(exc_value).__name__,
                "stacktrace": stack,
            },
        )

    def read_events(self, *, trace_id: str | None = None) -> list[dict[str, Any]]:
        if not self._events_path.exists():
            return []
        expected = (trace_id or "").strip()
        events: list[dict[str, Any]] = []
        for line in self._events_path.read_text(encoding="utf-8", errors="ignore").splitlines():
            if not line.strip():
                continue
            try:
                payload = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not isinstance(payload, dict):
                continue
            if expected and str(payload.get("trace_id") or "").strip() != expected:
                continue
            events.append(payload)
        return events


_GLOBAL_SUPPORT: OperationalSupport | None = None
_HOOK_INSTALLED = False


def get_operational_support() -> OperationalSupport:
    global _GLOBAL_SUPPORT
    if _GLOBAL_SUPPORT is None:
        _GLOBAL_SUPPORT = OperationalSupport()
    return _GLOBAL_SUPPORT


def set_operational_support(support: OperationalSupport | None) -> None:
    global _GLOBAL_SUPPORT
    _GLOBAL_SUPPORT = support


def install_global_exception_hook(support: OperationalSupport | None = None) -> None:
    global _HOOK_INSTALLED
    if _HOOK_INSTALLED:
        return

    recorder = support or get_operational_support()
    previous_hook = sys.excepthook

    def _hook(exc_type: type[BaseException], exc_value: BaseException, exc_tb: Any) -> None:
        try:
            recorder.capture_exception(exc_value=exc_value, context="main-thread")
        except OSError:
            pass
        previous_hook(exc_type, exc_value, exc_tb)

    sys.excepthook = _hook
    _HOOK_INSTALLED = True


__all__ = [
    "OperationalSupport",
    "REDACTED",
    "REDACTED_PHONE",
    "TraceIdLogFilter",
    "bind_trace_id",
    "create_trace_id",
    "current_trace_id",
    "get_operational_support",
    "install_global_exception_hook",
    "redact_text",
    "redact_value",
    "set_operational_support",
]
