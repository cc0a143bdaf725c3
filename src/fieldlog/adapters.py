"""
Output sinks.

A sink is anything with write(bytes). Text streams are wrapped in
StreamSink. MultiWriter fans one write out to several sinks, and
RotatingFileWriter reopens its target file whenever the formatted
time stamp in its name changes.
"""

from __future__ import annotations

import io
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import IO, Any, Callable, Optional, Protocol

from fieldlog.records import RotationError


TIME_TOKEN = "${time}"


class Sink(Protocol):
    def write(self, data: bytes) -> Any: ...


class StreamSink:
    """Writes bytes to a text stream, decoding as UTF-8."""

    def __init__(self, stream: IO[str]):
        self.stream = stream

    def write(self, data: bytes) -> None:
        self.stream.write(data.decode("utf-8", errors="replace"))
        self.stream.flush()

    def isatty(self) -> bool:
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())


class StandardErrorSink(StreamSink):
    """
    Writes to whatever sys.stderr is at write time.

    Resolving late keeps redirected or captured stderr working.
    """

    def __init__(self) -> None:
        super().__init__(sys.stderr)

    def write(self, data: bytes) -> None:
        self.stream = sys.stderr
        super().write(data)

    def isatty(self) -> bool:
        self.stream = sys.stderr
        return super().isatty()


class StandardOutputSink(StreamSink):
    """Writes to whatever sys.stdout is at write time."""

    def __init__(self) -> None:
        super().__init__(sys.stdout)

    def write(self, data: bytes) -> None:
        self.stream = sys.stdout
        super().write(data)

    def isatty(self) -> bool:
        self.stream = sys.stdout
        return super().isatty()


def as_sink(out: Any) -> Sink:
    """Wrap text streams; byte writers pass through untouched."""
    if isinstance(out, io.TextIOBase):
        return StreamSink(out)
    if not callable(getattr(out, "write", None)):
        raise TypeError(f"Output must have a write() method, got {type(out).__name__}")
    return out


class MultiWriter:
    """
    Fan-out sink: each write goes to every writer, in order.

    A failing writer stops the fan-out and its exception propagates.
    """

    def __init__(self, *writers: Sink):
        self.writers = list(writers)

    def write(self, data: bytes) -> int:
        for writer in self.writers:
            writer.write(data)
        return len(data)

    def isatty(self) -> bool:
        return False

    def close(self) -> None:
        for writer in self.writers:
            close = getattr(writer, "close", None)
            if close is not None:
                close()


class RotatingFileWriter:
    """
    Time-keyed file sink.

    The target is base_path + name_template, with ${time} replaced by the
    current time formatted with time_format (strftime). Before every write
    the stamp is recomputed; a new stamp closes the old file and opens
    the new one.

    Example: name_template="app-${time}.log", time_format="%Y%m%d-%H%M"
    writes app-20260212-1432.log, then app-20260212-1433.log a minute later.
    """

    def __init__(
        self,
        base_path: str | Path,
        name_template: str,
        time_format: str,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if TIME_TOKEN not in name_template:
            raise RotationError(
                f"Name template {name_template!r} has no {TIME_TOKEN} token"
            )
        self.base_path = str(base_path)
        self.name_template = name_template
        self.time_format = time_format
        self._clock = clock or datetime.now
        self._stamp: Optional[str] = None
        self._file: Optional[IO[bytes]] = None
        self._lock = threading.Lock()
        self._rotate(self._current_stamp())

    @property
    def current_path(self) -> Path:
        return self.path_for(self._stamp or self._current_stamp())

    @property
    def stamp(self) -> Optional[str]:
        return self._stamp

    def path_for(self, stamp: str) -> Path:
        return Path(self.base_path + self.name_template.replace(TIME_TOKEN, stamp))

    def _current_stamp(self) -> str:
        return self._clock().strftime(self.time_format)

    def _rotate(self, stamp: str) -> None:
        """Open the file for `stamp`, closing the previous one. Caller holds the lock or is __init__."""
        path = self.path_for(stamp)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            new_file = open(path, "ab")
        except OSError as err:
            raise RotationError(f"Failed to open log file {path}: {err}") from err

        if self._file is not None:
            self._file.close()
        self._file = new_file
        self._stamp = stamp

    def write(self, data: bytes) -> int:
        stamp = self._current_stamp()
        with self._lock:
            if stamp != self._stamp or self._file is None:
                self._rotate(stamp)
            self._file.write(data)
            self._file.flush()
        return len(data)

    def isatty(self) -> bool:
        return False

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None
