"""
fieldlog: structured, leveled logging.

Entries carry structured fields, are enriched with time and call site,
fired through hooks, serialized by a pluggable formatter and written to a
sink that may rotate by time.
"""

from fieldlog.records import (
    ALL_LEVELS,
    FieldLogError,
    Fields,
    InvalidLevel,
    Level,
    LoggerConfigError,
    PanicError,
    RotationError,
    parse_level,
)
from fieldlog.caller import Caller, get_caller
from fieldlog.hooks import Hook, LevelHooks
from fieldlog.entry import Entry
from fieldlog.adapters import MultiWriter, RotatingFileWriter, StreamSink
from fieldlog.formatters import FieldMap, Formatter, JsonFormatter, TextFormatter
from fieldlog.core import Logger
from fieldlog.config import LoggerConfig
from fieldlog.exit import register_exit_handler, defer_exit_handler
from fieldlog.exported import (
    add_hook,
    get_level,
    is_level_enabled,
    set_formatter,
    set_level,
    set_output,
    set_output_file,
    set_report_caller,
    standard_logger,
    with_context,
    with_error,
    with_field,
    with_fields,
    with_time,
)

__all__ = [
    "ALL_LEVELS",
    "Caller",
    "Entry",
    "FieldLogError",
    "FieldMap",
    "Fields",
    "Formatter",
    "Hook",
    "InvalidLevel",
    "JsonFormatter",
    "Level",
    "LevelHooks",
    "Logger",
    "LoggerConfig",
    "LoggerConfigError",
    "MultiWriter",
    "PanicError",
    "RotatingFileWriter",
    "RotationError",
    "StreamSink",
    "TextFormatter",
    "add_hook",
    "defer_exit_handler",
    "get_caller",
    "get_level",
    "is_level_enabled",
    "parse_level",
    "register_exit_handler",
    "set_formatter",
    "set_level",
    "set_output",
    "set_output_file",
    "set_report_caller",
    "standard_logger",
    "with_context",
    "with_error",
    "with_field",
    "with_fields",
    "with_time",
]
