"""
Logger: shared configuration and dispatch hub for entries.

One lock guards the sink, formatter, hooks and caller flag. It is held
briefly to resolve the caller, for the duration of hook firing, and for
format + write, so writes to the sink never interleave. The level
threshold is a plain attribute read outside the lock: level checks never
contend with the write path.

Usage:
    log = Logger()
    log.set_level(Level.DEBUG)
    log.with_field("user", "a").info("login ok")
"""

from __future__ import annotations

import sys
import threading
from collections import deque
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from fieldlog.adapters import (
    MultiWriter,
    RotatingFileWriter,
    Sink,
    StandardErrorSink,
    StandardOutputSink,
    as_sink,
)
from fieldlog.config import LoggerConfig, OutputStream
from fieldlog.entry import Entry, LevelMethods
from fieldlog.exit import run_exit_handlers
from fieldlog.formatters import Formatter, TextFormatter
from fieldlog.hooks import Hook, LevelHooks
from fieldlog.records import Fields, Level, LoggerConfigError


class NoLock:
    """Lock stand-in for single-threaded embeddings."""

    def acquire(self, blocking: bool = True, timeout: float = -1) -> bool:
        return True

    def release(self) -> None:
        pass

    def __enter__(self) -> "NoLock":
        return self

    def __exit__(self, *exc: Any) -> None:
        pass


class EntryPool:
    """Reusable Entry objects for one Logger. Released entries are reset."""

    def __init__(self, logger: "Logger", max_size: int = 64) -> None:
        self._logger = logger
        self._free: deque[Entry] = deque(maxlen=max_size)

    def get(self) -> Entry:
        try:
            return self._free.pop()
        except IndexError:
            return Entry(logger=self._logger)

    def put(self, entry: Entry) -> None:
        entry.data = {}
        entry.time = None
        entry.context = None
        entry.err = ""
        entry.message = ""
        entry.caller = None
        entry.payload = None
        self._free.append(entry)

    @property
    def free_count(self) -> int:
        return len(self._free)


class Logger(LevelMethods):
    """
    Process-shared logger.

    no_lock=True swaps the mutex for a no-op lock. It is a promise by the
    caller that the Logger is only used from one thread; it must be chosen
    before the first entry is dispatched.
    """

    _instance: Optional["Logger"] = None
    _instance_lock = threading.Lock()

    def __init__(
        self,
        out: Any = None,
        formatter: Formatter | None = None,
        level: Level | str | int = Level.INFO,
        report_caller: bool = False,
        no_lock: bool = False,
        exit_func: Callable[[int], Any] | None = None,
    ) -> None:
        explicit = as_sink(out) if out is not None else None
        self.out: Sink = explicit if explicit is not None else StandardErrorSink()
        self.formatter: Formatter = formatter or TextFormatter()
        self.hooks = LevelHooks()
        self.report_caller = report_caller
        self.exit_func: Callable[[int], Any] = exit_func or sys.exit
        self._level: Level = Level.from_value(level)
        self._mu: Any = NoLock() if no_lock else threading.Lock()
        self._no_lock = no_lock
        self._explicit_output: Optional[Sink] = explicit
        self._file_writer: Optional[RotatingFileWriter] = None
        self._dispatched = False
        self._entry_pool = EntryPool(self)

    # ── Default instance ──────────────────────────────────────────

    @classmethod
    def instance(cls) -> "Logger":
        """Get or create the process-wide default Logger."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """
        Drop the default Logger. For testing only.
        Closes the file writer it installed, if any.
        """
        with cls._instance_lock:
            if cls._instance is not None:
                if cls._instance._file_writer is not None:
                    cls._instance._file_writer.close()
                cls._instance = None

    # ── Configuration ─────────────────────────────────────────────

    @classmethod
    def from_config(cls, config: "dict | LoggerConfig", **kwargs: Any) -> "Logger":
        """Build a Logger from a config dict or LoggerConfig."""
        if isinstance(config, dict):
            config = LoggerConfig.from_dict(config)
        logger = cls(no_lock=config.no_lock, **kwargs)
        logger.configure(config)
        return logger

    def configure(self, config: "dict | LoggerConfig") -> None:
        """
        Apply a config dict (parsed YAML) or LoggerConfig.

        Expected structure:
            level: debug
            report_caller: true
            output: stderr
            formatter: {type: json, field_map: {message: msg}}
            rotation: {base_path: logs/, name_template: app-${time}.log,
                       time_format: "%Y-%m-%d", keep_previous: false}
        """
        if isinstance(config, dict):
            config = LoggerConfig.from_dict(config)

        if config.no_lock and not self._no_lock:
            self.set_no_lock()

        self.set_level(config.level_value)
        self.set_report_caller(config.report_caller)
        self.set_formatter(config.formatter.build())

        if config.output == OutputStream.STDOUT:
            self.set_output(StandardOutputSink())
        elif config.output == OutputStream.STDERR:
            self.set_output(StandardErrorSink())

        if config.rotation is not None:
            self.set_output_file(
                config.rotation.base_path,
                config.rotation.name_template,
                config.rotation.time_format,
                keep_previous=config.rotation.keep_previous,
            )

    def set_no_lock(self) -> None:
        """Switch to a no-op lock. Only allowed before the first dispatch."""
        if self._dispatched:
            raise LoggerConfigError(
                "set_no_lock() after the logger has dispatched entries; "
                "pass no_lock=True to Logger() instead"
            )
        self._mu = NoLock()
        self._no_lock = True

    def set_formatter(self, formatter: Formatter) -> None:
        with self._mu:
            self.formatter = formatter

    def set_output(self, out: Any) -> None:
        """Replace the sink. Text streams are wrapped automatically."""
        sink = as_sink(out)
        with self._mu:
            self._explicit_output = sink
            self.out = sink
            replaced, self._file_writer = self._file_writer, None
        if replaced is not None:
            replaced.close()

    def set_output_file(
        self,
        base_path: str | Path,
        name_template: str,
        time_format: str,
        keep_previous: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> RotatingFileWriter:
        """
        Write to a time-rotated file.

        With keep_previous=True the file is combined with the output last
        given to set_output() via a MultiWriter; otherwise it replaces the
        sink. The constructor's stderr default is never kept implicitly.
        A file writer installed by an earlier call is closed. Raises
        RotationError if the file cannot be opened.
        """
        writer = RotatingFileWriter(base_path, name_template, time_format, clock=clock)
        with self._mu:
            if keep_previous and self._explicit_output is not None:
                self.out = MultiWriter(writer, self._explicit_output)
            else:
                self.out = writer
            replaced, self._file_writer = self._file_writer, writer
        if replaced is not None:
            replaced.close()
        return writer

    def set_report_caller(self, report_caller: bool) -> None:
        with self._mu:
            self.report_caller = report_caller

    def add_hook(self, hook: Hook) -> None:
        with self._mu:
            self.hooks.add(hook)

    def replace_hooks(self, hooks: LevelHooks) -> LevelHooks:
        """Swap the hook registry, returning the old one."""
        with self._mu:
            old, self.hooks = self.hooks, hooks
        return old

    # ── Level Management ──────────────────────────────────────────

    @property
    def level(self) -> Level:
        return self._level

    @level.setter
    def level(self, value: Level | str | int) -> None:
        self._level = Level.from_value(value)

    def set_level(self, level: Level | str | int) -> None:
        self._level = Level.from_value(level)

    def get_level(self) -> Level:
        return self._level

    def is_level_enabled(self, level: Level | int) -> bool:
        return self._level >= level

    # ── Entries ───────────────────────────────────────────────────

    def _new_entry(self) -> Entry:
        return self._entry_pool.get()

    def _release_entry(self, entry: Entry) -> None:
        self._entry_pool.put(entry)

    def with_field(self, key: str, value: Any) -> Entry:
        entry = self._new_entry()
        try:
            return entry.with_field(key, value)
        finally:
            self._release_entry(entry)

    def with_fields(self, fields: Fields) -> Entry:
        entry = self._new_entry()
        try:
            return entry.with_fields(fields)
        finally:
            self._release_entry(entry)

    def with_error(self, err: BaseException) -> Entry:
        entry = self._new_entry()
        try:
            return entry.with_error(err)
        finally:
            self._release_entry(entry)

    def with_context(self, ctx: Any) -> Entry:
        entry = self._new_entry()
        try:
            return entry.with_context(ctx)
        finally:
            self._release_entry(entry)

    def with_time(self, t: datetime) -> Entry:
        entry = self._new_entry()
        try:
            return entry.with_time(t)
        finally:
            self._release_entry(entry)

    # ── Core Logging ──────────────────────────────────────────────

    def log(self, level: Level, *args: Any, payload: Any = None) -> None:
        if self.is_level_enabled(level):
            entry = self._new_entry()
            try:
                entry.log(level, *args, payload=payload)
            finally:
                self._release_entry(entry)

    def logf(self, level: Level, fmt: str, *args: Any, payload: Any = None) -> None:
        if self.is_level_enabled(level):
            entry = self._new_entry()
            try:
                entry.logf(level, fmt, *args, payload=payload)
            finally:
                self._release_entry(entry)

    def logln(self, level: Level, *args: Any, payload: Any = None) -> None:
        if self.is_level_enabled(level):
            entry = self._new_entry()
            try:
                entry.logln(level, *args, payload=payload)
            finally:
                self._release_entry(entry)

    def _exit_after_fatal(self) -> None:
        self.exit(1)

    def exit(self, code: int) -> None:
        """Run exit handlers, then terminate through exit_func."""
        run_exit_handlers()
        self.exit_func(code)

    # ── Status ────────────────────────────────────────────────────

    def status(self) -> dict:
        """Current logger state for display."""
        with self._mu:
            return {
                "level": self._level.text,
                "formatter": type(self.formatter).__name__,
                "output": type(self.out).__name__,
                "report_caller": self.report_caller,
                "no_lock": self._no_lock,
                "hooks": self.hooks.describe(),
            }

