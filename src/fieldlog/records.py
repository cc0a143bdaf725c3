"""
Levels, field maps and the error taxonomy.

Levels ascend from most severe (PANIC=0) to least severe (TRACE=6).
A level is enabled when its value is <= the logger's threshold.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


Fields = dict[str, Any]


# ── Errors ────────────────────────────────────────────────────────

class FieldLogError(Exception):
    """Base class for every error raised by fieldlog."""


class InvalidLevel(FieldLogError, ValueError):
    """Level text or value that does not name a known level."""


class LoggerConfigError(FieldLogError):
    """Logger reconfigured in a way it cannot honour."""


class RotationError(FieldLogError):
    """Rotation target file could not be opened."""


class PanicError(FieldLogError):
    """
    Raised after a PANIC-level entry has been written.

    Carries the finalized entry so the caller can recover and inspect it.
    """

    def __init__(self, entry: Any) -> None:
        super().__init__(entry.message)
        self.entry = entry


# ── Levels ────────────────────────────────────────────────────────

class Level(IntEnum):
    """Severity levels, most severe first."""
    PANIC = 0
    FATAL = 1
    ERROR = 2
    WARN = 3
    INFO = 4
    DEBUG = 5
    TRACE = 6

    @property
    def text(self) -> str:
        return LEVEL_NAMES[self]

    def __str__(self) -> str:
        return self.text

    @classmethod
    def parse(cls, text: str) -> "Level":
        """Resolve level from text, case-insensitive. "warn" and "warning" both work."""
        level = _LEVELS_BY_TEXT.get(text.lower())
        if level is None:
            raise InvalidLevel(f"not a valid level: {text!r}")
        return level

    @classmethod
    def from_value(cls, value: "int | str | Level") -> "Level":
        """Resolve level from an int, text or Level."""
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise InvalidLevel(
                    f"not a valid level: {value}. "
                    f"Valid values: {', '.join(f'{m.text}={m.value}' for m in cls)}"
                ) from None
        raise TypeError(f"Expected int or str, got {type(value).__name__}")


LEVEL_NAMES: dict[Level, str] = {
    Level.PANIC: "panic",
    Level.FATAL: "fatal",
    Level.ERROR: "error",
    Level.WARN: "warning",
    Level.INFO: "info",
    Level.DEBUG: "debug",
    Level.TRACE: "trace",
}

_LEVELS_BY_TEXT: dict[str, Level] = {name: level for level, name in LEVEL_NAMES.items()}
_LEVELS_BY_TEXT["warn"] = Level.WARN

ALL_LEVELS: tuple[Level, ...] = tuple(Level)


def parse_level(text: str) -> Level:
    """Parse level text. Raises InvalidLevel on unknown text."""
    return Level.parse(text)
