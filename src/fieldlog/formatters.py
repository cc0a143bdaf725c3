"""
Formatters: Entry → bytes.

A formatter treats the entry as read-only. Reserved keys are rendered by
the formatter itself; user fields that would collide with them are moved
to "fields.<key>" on a private copy of the field map, never overwritten.

  - text: @timestamp="2026-02-12T14:32:05+00:00" level=info message="hello" user=a
  - json: {"@timestamp": "...", "level": "info", "message": "hello", "user": "a"}
"""

from __future__ import annotations

import dataclasses
import json
from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel

from fieldlog.records import Fields, Level

if TYPE_CHECKING:
    from fieldlog.entry import Entry


FIELD_KEY_MSG = "message"
FIELD_KEY_LEVEL = "level"
FIELD_KEY_TIME = "@timestamp"
FIELD_KEY_LOGGER_ERROR = "error"
FIELD_KEY_FUNC = "func"
FIELD_KEY_FILE = "file"
FIELD_KEY_PAYLOAD = "payload"


class FieldMap(dict):
    """Renames reserved keys, e.g. FieldMap({"message": "msg"})."""

    def resolve(self, key: str) -> str:
        return self.get(key, key)


def prefix_field_clashes(
    data: Fields, field_map: FieldMap, entry: "Entry", payload: bool = False
) -> None:
    """
    Move user fields that collide with reserved keys to "fields.<key>".

    Mutates `data`; pass a copy. func/file only collide when the entry
    reports its caller, and the payload key only when the formatter
    renders a payload (payload=True).
    """
    reserved = [FIELD_KEY_TIME, FIELD_KEY_MSG, FIELD_KEY_LEVEL, FIELD_KEY_LOGGER_ERROR]
    if entry.has_caller():
        reserved.extend([FIELD_KEY_FUNC, FIELD_KEY_FILE])
    if payload:
        reserved.append(FIELD_KEY_PAYLOAD)

    for key in reserved:
        resolved = field_map.resolve(key)
        if resolved in data:
            data[f"fields.{resolved}"] = data.pop(resolved)


class Formatter(ABC):
    """Base formatter. Raise on failure; the logger reports and drops the entry."""

    @abstractmethod
    def format(self, entry: "Entry") -> bytes: ...


class _BaseFormatter(Formatter):
    def __init__(
        self,
        timestamp_format: Optional[str] = None,
        disable_timestamp: bool = False,
        field_map: Optional[dict[str, str]] = None,
    ):
        self.timestamp_format = timestamp_format
        self.disable_timestamp = disable_timestamp
        self.field_map = FieldMap(field_map or {})

    def _format_time(self, ts: Optional[datetime]) -> Optional[str]:
        if self.disable_timestamp or ts is None:
            return None
        if self.timestamp_format:
            return ts.strftime(self.timestamp_format)
        return ts.isoformat(timespec="seconds")

    def _reserved_values(self, entry: "Entry") -> dict[str, Any]:
        """Reserved key → value, in render order, with the field map applied."""
        values: dict[str, Any] = {}
        timestamp = self._format_time(entry.time)
        if timestamp is not None:
            values[self.field_map.resolve(FIELD_KEY_TIME)] = timestamp
        values[self.field_map.resolve(FIELD_KEY_LEVEL)] = entry.level.text
        values[self.field_map.resolve(FIELD_KEY_MSG)] = entry.message
        if entry.err:
            values[self.field_map.resolve(FIELD_KEY_LOGGER_ERROR)] = entry.err
        if entry.has_caller():
            values[self.field_map.resolve(FIELD_KEY_FUNC)] = (
                f"{entry.caller.module}.{entry.caller.function}"
            )
            values[self.field_map.resolve(FIELD_KEY_FILE)] = entry.caller.location
        return values

    @staticmethod
    def _emit(entry: "Entry", rendered: str) -> bytes:
        buffer = entry.buffer if entry.buffer is not None else bytearray()
        buffer += rendered.encode("utf-8")
        buffer += b"\n"
        return bytes(buffer)


class TextFormatter(_BaseFormatter):
    """
    logfmt-style single line, the logger default.

    colors=None auto-detects: colour is used when the logger's sink is a
    terminal.
    """

    COLORS = {
        Level.TRACE: "\033[90m",     # gray
        Level.DEBUG: "\033[36m",     # cyan
        Level.INFO: "\033[37m",      # white
        Level.WARN: "\033[33m",      # yellow
        Level.ERROR: "\033[31m",     # red
        Level.FATAL: "\033[91m",     # bright red
        Level.PANIC: "\033[1;91m",   # bold bright red
    }
    RESET = "\033[0m"

    def __init__(
        self,
        timestamp_format: Optional[str] = None,
        disable_timestamp: bool = False,
        field_map: Optional[dict[str, str]] = None,
        colors: Optional[bool] = None,
        sort_keys: bool = True,
    ):
        super().__init__(timestamp_format, disable_timestamp, field_map)
        self.colors = colors
        self.sort_keys = sort_keys

    def format(self, entry: "Entry") -> bytes:
        data = dict(entry.data)
        prefix_field_clashes(data, self.field_map, entry)

        reserved = self._reserved_values(entry)
        level_key = self.field_map.resolve(FIELD_KEY_LEVEL)
        if self._use_colors(entry):
            color = self.COLORS.get(entry.level, "")
            reserved[level_key] = f"{color}{reserved[level_key]}{self.RESET}"

        keys = sorted(data) if self.sort_keys else list(data)
        pairs = [f"{k}={_quote(v)}" for k, v in reserved.items()]
        pairs.extend(f"{k}={_quote(_format_value(data[k]))}" for k in keys)
        return self._emit(entry, " ".join(pairs))

    def _use_colors(self, entry: "Entry") -> bool:
        if self.colors is not None:
            return self.colors
        isatty = getattr(entry.logger.out, "isatty", None)
        return bool(isatty and isatty())


class JsonFormatter(_BaseFormatter):
    """One JSON object per line. Structured payloads render under "payload"."""

    def __init__(
        self,
        timestamp_format: Optional[str] = None,
        disable_timestamp: bool = False,
        field_map: Optional[dict[str, str]] = None,
        pretty_print: bool = False,
        sort_keys: bool = False,
    ):
        super().__init__(timestamp_format, disable_timestamp, field_map)
        self.pretty_print = pretty_print
        self.sort_keys = sort_keys

    def format(self, entry: "Entry") -> bytes:
        data = dict(entry.data)
        prefix_field_clashes(data, self.field_map, entry, payload=entry.payload is not None)

        obj: dict[str, Any] = {k: _serialize_value(v) for k, v in data.items()}
        obj.update(self._reserved_values(entry))
        if entry.payload is not None:
            obj[self.field_map.resolve(FIELD_KEY_PAYLOAD)] = _serialize_payload(entry.payload)

        rendered = json.dumps(
            obj,
            default=str,
            indent=2 if self.pretty_print else None,
            sort_keys=self.sort_keys,
        )
        return self._emit(entry, rendered)


# ── Helpers ───────────────────────────────────────────────────────

def _format_value(v: Any) -> str:
    if isinstance(v, BaseException):
        return str(v) or type(v).__name__
    return str(v)


def _quote(text: str) -> str:
    """Quote text for logfmt when it is empty or has spaces, quotes or '='."""
    if text == "" or any(c in text for c in ' "=\n\t'):
        return json.dumps(text)
    return text


def _serialize_value(v: Any) -> Any:
    """Make a value JSON-serializable."""
    if isinstance(v, (str, int, float, bool, type(None))):
        return v
    if isinstance(v, BaseException):
        return str(v) or type(v).__name__
    if isinstance(v, (list, tuple)):
        return [_serialize_value(i) for i in v]
    if isinstance(v, dict):
        return {str(k): _serialize_value(val) for k, val in v.items()}
    if isinstance(v, datetime):
        return v.isoformat()
    return str(v)


def _serialize_payload(payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json")
    if dataclasses.is_dataclass(payload) and not isinstance(payload, type):
        return _serialize_value(dataclasses.asdict(payload))
    return _serialize_value(payload)
