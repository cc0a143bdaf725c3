"""
Entry: one log event in flight.

Every with_* call returns a new Entry holding a copy of the field map;
the receiver is never touched. Finalization (log) also works on a copy,
so a built Entry can be logged any number of times from any thread.

Usage:
    entry = logger.with_fields({"user": "a", "attempt": 2})
    entry.info("login ok")
    entry.with_error(exc).warning("login retry")
"""

from __future__ import annotations

import dataclasses
import functools
import inspect
import sys
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel

from fieldlog.caller import Caller, get_caller
from fieldlog.records import Fields, Level, PanicError, RotationError

if TYPE_CHECKING:
    from fieldlog.core import Logger


ERROR_KEY = "error"


class BufferPool:
    """Reusable byte buffers for serialization. Cleared on every get()."""

    def __init__(self, max_size: int = 64) -> None:
        self._free: deque[bytearray] = deque(maxlen=max_size)

    def get(self) -> bytearray:
        try:
            buffer = self._free.pop()
        except IndexError:
            return bytearray()
        buffer.clear()
        return buffer

    def put(self, buffer: bytearray) -> None:
        self._free.append(buffer)

    @property
    def free_count(self) -> int:
        return len(self._free)


buffer_pool = BufferPool()


# ── Severity sugar shared by Entry and Logger ─────────────────────

class LevelMethods:
    """
    Per-level shortcuts over log(), logf() and logln().

    Plain variants join operands print-style, f variants use %-formatting,
    ln variants always separate operands with a space. Fatal variants exit
    with code 1 after the write.
    """

    def log(self, level: Level, *args: Any, payload: Any = None) -> None:
        raise NotImplementedError

    def logf(self, level: Level, fmt: str, *args: Any, payload: Any = None) -> None:
        raise NotImplementedError

    def logln(self, level: Level, *args: Any, payload: Any = None) -> None:
        raise NotImplementedError

    def _exit_after_fatal(self) -> None:
        raise NotImplementedError

    def trace(self, *args: Any, payload: Any = None) -> None:
        self.log(Level.TRACE, *args, payload=payload)

    def debug(self, *args: Any, payload: Any = None) -> None:
        self.log(Level.DEBUG, *args, payload=payload)

    def info(self, *args: Any, payload: Any = None) -> None:
        self.log(Level.INFO, *args, payload=payload)

    def print(self, *args: Any, payload: Any = None) -> None:
        self.log(Level.INFO, *args, payload=payload)

    def warning(self, *args: Any, payload: Any = None) -> None:
        self.log(Level.WARN, *args, payload=payload)

    warn = warning

    def error(self, *args: Any, payload: Any = None) -> None:
        self.log(Level.ERROR, *args, payload=payload)

    def fatal(self, *args: Any, payload: Any = None) -> None:
        self.log(Level.FATAL, *args, payload=payload)
        self._exit_after_fatal()

    def panic(self, *args: Any, payload: Any = None) -> None:
        self.log(Level.PANIC, *args, payload=payload)

    # ── %-formatted ───────────────────────────────────────────────

    def tracef(self, fmt: str, *args: Any, payload: Any = None) -> None:
        self.logf(Level.TRACE, fmt, *args, payload=payload)

    def debugf(self, fmt: str, *args: Any, payload: Any = None) -> None:
        self.logf(Level.DEBUG, fmt, *args, payload=payload)

    def infof(self, fmt: str, *args: Any, payload: Any = None) -> None:
        self.logf(Level.INFO, fmt, *args, payload=payload)

    def printf(self, fmt: str, *args: Any, payload: Any = None) -> None:
        self.logf(Level.INFO, fmt, *args, payload=payload)

    def warningf(self, fmt: str, *args: Any, payload: Any = None) -> None:
        self.logf(Level.WARN, fmt, *args, payload=payload)

    warnf = warningf

    def errorf(self, fmt: str, *args: Any, payload: Any = None) -> None:
        self.logf(Level.ERROR, fmt, *args, payload=payload)

    def fatalf(self, fmt: str, *args: Any, payload: Any = None) -> None:
        self.logf(Level.FATAL, fmt, *args, payload=payload)
        self._exit_after_fatal()

    def panicf(self, fmt: str, *args: Any, payload: Any = None) -> None:
        self.logf(Level.PANIC, fmt, *args, payload=payload)

    # ── Space-joined ──────────────────────────────────────────────

    def traceln(self, *args: Any, payload: Any = None) -> None:
        self.logln(Level.TRACE, *args, payload=payload)

    def debugln(self, *args: Any, payload: Any = None) -> None:
        self.logln(Level.DEBUG, *args, payload=payload)

    def infoln(self, *args: Any, payload: Any = None) -> None:
        self.logln(Level.INFO, *args, payload=payload)

    def println(self, *args: Any, payload: Any = None) -> None:
        self.logln(Level.INFO, *args, payload=payload)

    def warningln(self, *args: Any, payload: Any = None) -> None:
        self.logln(Level.WARN, *args, payload=payload)

    warnln = warningln

    def errorln(self, *args: Any, payload: Any = None) -> None:
        self.logln(Level.ERROR, *args, payload=payload)

    def fatalln(self, *args: Any, payload: Any = None) -> None:
        self.logln(Level.FATAL, *args, payload=payload)
        self._exit_after_fatal()

    def panicln(self, *args: Any, payload: Any = None) -> None:
        self.logln(Level.PANIC, *args, payload=payload)


# ── Entry ─────────────────────────────────────────────────────────

@dataclass(eq=False)
class Entry(LevelMethods):
    """
    One logging event.

    `err` accumulates notes about fields that could not be attached;
    formatters render it under the "error" key. `buffer` is only set
    while the entry is being written.
    """
    logger: "Logger" = field(repr=False)
    data: Fields = field(default_factory=dict)
    time: Optional[datetime] = None
    level: Level = Level.PANIC
    caller: Optional[Caller] = None
    message: str = ""
    buffer: Optional[bytearray] = field(default=None, repr=False)
    context: Any = None
    err: str = ""
    payload: Any = None

    # ── Builders (copy-on-write) ──────────────────────────────────

    def with_error(self, err: BaseException) -> "Entry":
        """Attach an error under the "error" key."""
        return self.with_field(ERROR_KEY, err)

    def with_context(self, ctx: Any) -> "Entry":
        """Attach an opaque context value (trace/cancellation data)."""
        return Entry(
            logger=self.logger, data=dict(self.data), time=self.time,
            context=ctx, err=self.err,
        )

    def with_field(self, key: str, value: Any) -> "Entry":
        return self.with_fields({key: value})

    def with_fields(self, fields: Fields) -> "Entry":
        """
        Merge `fields` into a copy of this entry's data.

        Function values are not serializable: they are dropped and noted
        in `err` instead.
        """
        data = dict(self.data)
        notes = [self.err] if self.err else []
        for key, value in fields.items():
            if _is_function_value(value):
                notes.append(f'can not add field "{key}"')
            else:
                data[key] = value
        return Entry(
            logger=self.logger, data=data, time=self.time,
            context=self.context, err=", ".join(notes),
        )

    def with_time(self, t: datetime) -> "Entry":
        """Override the entry time."""
        return Entry(
            logger=self.logger, data=dict(self.data), time=t,
            context=self.context, err=self.err,
        )

    # ── Rendering ─────────────────────────────────────────────────

    def to_bytes(self) -> bytes:
        """Render through the logger's formatter without writing."""
        return self.logger.formatter.format(self)

    def to_string(self) -> str:
        return self.to_bytes().decode("utf-8")

    def has_caller(self) -> bool:
        return (
            self.logger is not None
            and self.logger.report_caller
            and self.caller is not None
        )

    # ── Logging ───────────────────────────────────────────────────

    def log(self, level: Level, *args: Any, payload: Any = None) -> None:
        if self.logger.is_level_enabled(level):
            self._log(Level(level), _sprint(args), payload)

    def logf(self, level: Level, fmt: str, *args: Any, payload: Any = None) -> None:
        if self.logger.is_level_enabled(level):
            self.log(level, _sprintf(fmt, args), payload=payload)

    def logln(self, level: Level, *args: Any, payload: Any = None) -> None:
        if self.logger.is_level_enabled(level):
            self.log(level, " ".join(str(arg) for arg in args), payload=payload)

    def _exit_after_fatal(self) -> None:
        self.logger.exit(1)

    def _log(self, level: Level, message: str, payload: Any) -> None:
        """Finalize a copy of this entry, fire hooks, then write it."""
        entry = dataclasses.replace(self, data=dict(self.data), buffer=None)
        if entry.time is None:
            entry.time = datetime.now(timezone.utc)
        entry.level = level
        if message:
            entry.message = message
        if payload is not None and _is_structured(payload):
            entry.payload = payload

        logger = entry.logger
        logger._dispatched = True
        with logger._mu:
            if logger.report_caller:
                entry.caller = get_caller()

        entry._fire_hooks()

        buffer = buffer_pool.get()
        entry.buffer = buffer
        try:
            entry._write()
        finally:
            entry.buffer = None
            buffer_pool.put(buffer)

        if level <= Level.PANIC:
            raise PanicError(entry)

    def _fire_hooks(self) -> None:
        with self.logger._mu:
            try:
                self.logger.hooks.fire(self.level, self)
            except Exception as err:
                print(f"Failed to fire hook: {err}", file=sys.stderr)

    def _write(self) -> None:
        logger = self.logger
        with logger._mu:
            try:
                serialized = logger.formatter.format(self)
            except Exception as err:
                print(f"Failed to format entry: {err}", file=sys.stderr)
                return
            try:
                logger.out.write(serialized)
            except RotationError:
                raise
            except Exception as err:
                print(f"Failed to write to log: {err}", file=sys.stderr)


# ── Helpers ───────────────────────────────────────────────────────

def _is_function_value(value: Any) -> bool:
    """Functions, methods, builtins and partials cannot be stored as fields."""
    return inspect.isroutine(value) or isinstance(value, functools.partial)


def _is_structured(value: Any) -> bool:
    """A structured record: dataclass instance or pydantic model."""
    if isinstance(value, type):
        return False
    return dataclasses.is_dataclass(value) or isinstance(value, BaseModel)


def _sprintf(fmt: str, args: tuple) -> str:
    """%-format, falling back to the raw format plus operands on a mismatch."""
    if not args:
        return fmt
    try:
        return fmt % args
    except (TypeError, ValueError, KeyError) as err:
        print(f"Failed to format message: {err}", file=sys.stderr)
        return f"{fmt} %!(BADFORMAT {', '.join(repr(arg) for arg in args)})"


def _sprint(args: tuple) -> str:
    """Join operands print-style: a space only between two non-strings."""
    parts: list[str] = []
    prev_is_str = True
    for i, arg in enumerate(args):
        is_str = isinstance(arg, str)
        if i and not is_str and not prev_is_str:
            parts.append(" ")
        parts.append(str(arg))
        prev_is_str = is_str
    return "".join(parts)
