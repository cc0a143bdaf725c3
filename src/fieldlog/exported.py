"""
Module-level functions forwarding to the process-wide default Logger.

The default Logger is created on first use (Logger.instance()) and lives
for the rest of the process. Library code should accept an explicit Logger
instead of reaching for these.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

from fieldlog.adapters import RotatingFileWriter
from fieldlog.core import Logger
from fieldlog.entry import Entry
from fieldlog.formatters import Formatter
from fieldlog.hooks import Hook
from fieldlog.records import Fields, Level


def standard_logger() -> Logger:
    return Logger.instance()


# ── Configuration ─────────────────────────────────────────────────

def set_output(out: Any) -> None:
    Logger.instance().set_output(out)


def set_output_file(
    base_path: str | Path, name_template: str, time_format: str, keep_previous: bool = False
) -> RotatingFileWriter:
    return Logger.instance().set_output_file(
        base_path, name_template, time_format, keep_previous=keep_previous
    )


def set_formatter(formatter: Formatter) -> None:
    Logger.instance().set_formatter(formatter)


def set_report_caller(include: bool) -> None:
    Logger.instance().set_report_caller(include)


def set_level(level: Level | str | int) -> None:
    Logger.instance().set_level(level)


def get_level() -> Level:
    return Logger.instance().get_level()


def is_level_enabled(level: Level) -> bool:
    return Logger.instance().is_level_enabled(level)


def add_hook(hook: Hook) -> None:
    Logger.instance().add_hook(hook)


# ── Builders ──────────────────────────────────────────────────────

def with_field(key: str, value: Any) -> Entry:
    return Logger.instance().with_field(key, value)


def with_fields(fields: Fields) -> Entry:
    return Logger.instance().with_fields(fields)


def with_error(err: BaseException) -> Entry:
    return Logger.instance().with_error(err)


def with_context(ctx: Any) -> Entry:
    return Logger.instance().with_context(ctx)


def with_time(t: datetime) -> Entry:
    return Logger.instance().with_time(t)


# ── Severity ──────────────────────────────────────────────────────

def log(level: Level, *args: Any, payload: Any = None) -> None:
    Logger.instance().log(level, *args, payload=payload)


def trace(*args: Any, payload: Any = None) -> None:
    Logger.instance().trace(*args, payload=payload)


def debug(*args: Any, payload: Any = None) -> None:
    Logger.instance().debug(*args, payload=payload)


def info(*args: Any, payload: Any = None) -> None:
    Logger.instance().info(*args, payload=payload)


def print(*args: Any, payload: Any = None) -> None:
    Logger.instance().print(*args, payload=payload)


def warning(*args: Any, payload: Any = None) -> None:
    Logger.instance().warning(*args, payload=payload)


warn = warning


def error(*args: Any, payload: Any = None) -> None:
    Logger.instance().error(*args, payload=payload)


def fatal(*args: Any, payload: Any = None) -> None:
    Logger.instance().fatal(*args, payload=payload)


def panic(*args: Any, payload: Any = None) -> None:
    Logger.instance().panic(*args, payload=payload)


# ── %-formatted ───────────────────────────────────────────────────

def logf(level: Level, fmt: str, *args: Any, payload: Any = None) -> None:
    Logger.instance().logf(level, fmt, *args, payload=payload)


def tracef(fmt: str, *args: Any, payload: Any = None) -> None:
    Logger.instance().tracef(fmt, *args, payload=payload)


def debugf(fmt: str, *args: Any, payload: Any = None) -> None:
    Logger.instance().debugf(fmt, *args, payload=payload)


def infof(fmt: str, *args: Any, payload: Any = None) -> None:
    Logger.instance().infof(fmt, *args, payload=payload)


def printf(fmt: str, *args: Any, payload: Any = None) -> None:
    Logger.instance().printf(fmt, *args, payload=payload)


def warningf(fmt: str, *args: Any, payload: Any = None) -> None:
    Logger.instance().warningf(fmt, *args, payload=payload)


warnf = warningf


def errorf(fmt: str, *args: Any, payload: Any = None) -> None:
    Logger.instance().errorf(fmt, *args, payload=payload)


def fatalf(fmt: str, *args: Any, payload: Any = None) -> None:
    Logger.instance().fatalf(fmt, *args, payload=payload)


def panicf(fmt: str, *args: Any, payload: Any = None) -> None:
    Logger.instance().panicf(fmt, *args, payload=payload)


# ── Space-joined ──────────────────────────────────────────────────

def logln(level: Level, *args: Any, payload: Any = None) -> None:
    Logger.instance().logln(level, *args, payload=payload)


def traceln(*args: Any, payload: Any = None) -> None:
    Logger.instance().traceln(*args, payload=payload)


def debugln(*args: Any, payload: Any = None) -> None:
    Logger.instance().debugln(*args, payload=payload)


def infoln(*args: Any, payload: Any = None) -> None:
    Logger.instance().infoln(*args, payload=payload)


def println(*args: Any, payload: Any = None) -> None:
    Logger.instance().println(*args, payload=payload)


def warningln(*args: Any, payload: Any = None) -> None:
    Logger.instance().warningln(*args, payload=payload)


warnln = warningln


def errorln(*args: Any, payload: Any = None) -> None:
    Logger.instance().errorln(*args, payload=payload)


def fatalln(*args: Any, payload: Any = None) -> None:
    Logger.instance().fatalln(*args, payload=payload)


def panicln(*args: Any, payload: Any = None) -> None:
    Logger.instance().panicln(*args, payload=payload)


# ── Exit ──────────────────────────────────────────────────────────

def exit(code: int) -> None:
    Logger.instance().exit(code)
