"""
Call-site resolution.

Finds the first stack frame outside the fieldlog package. The package name
and the number of internal frames to skip are calibrated once, on first use.
"""

from __future__ import annotations

import sys
import threading
from dataclasses import dataclass
from types import FrameType
from typing import Optional


MAXIMUM_CALLER_DEPTH = 25

# get_caller, Entry._log, Entry.log
KNOWN_INTERNAL_FRAMES = 3


@dataclass(frozen=True)
class Caller:
    """Where a log call was made from."""
    package: str
    module: str
    file: str
    line: int
    function: str

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}"


_logging_package: Optional[str] = None
_minimum_caller_depth = 1
_calibrated = False
_calibrate_lock = threading.Lock()


def package_name(module: str) -> str:
    """Package portion of a dotted module name ("a.b.c" gives "a.b")."""
    head, _, _ = module.rpartition(".")
    return head or module


def _module_of(frame: FrameType) -> str:
    return frame.f_globals.get("__name__", "")


def _in_logging_package(module: str) -> bool:
    return module == _logging_package or module.startswith(f"{_logging_package}.")


def _calibrate(frame: Optional[FrameType]) -> None:
    """Locate our own package by walking up from get_caller. Runs once."""
    global _logging_package, _minimum_caller_depth, _calibrated
    if _calibrated:
        return

    with _calibrate_lock:
        if _calibrated:
            return
        for _ in range(MAXIMUM_CALLER_DEPTH):
            if frame is None:
                break
            if frame.f_code.co_name == "get_caller":
                _logging_package = package_name(_module_of(frame))
                break
            frame = frame.f_back
        if _logging_package is None:
            _logging_package = package_name(__name__)
        _minimum_caller_depth = KNOWN_INTERNAL_FRAMES
        _calibrated = True


def get_caller() -> Optional[Caller]:
    """
    Return the first frame outside the logging package, or None.

    None is a normal outcome: the stack may be shallower than the skip
    depth, or every frame within reach may belong to the package.
    """
    _calibrate(sys._getframe(0))

    try:
        frame: Optional[FrameType] = sys._getframe(_minimum_caller_depth)
    except ValueError:
        return None

    walked = 0
    while frame is not None and walked < MAXIMUM_CALLER_DEPTH:
        module = _module_of(frame)
        if not _in_logging_package(module):
            code = frame.f_code
            return Caller(
                package=package_name(module),
                module=module,
                file=code.co_filename,
                line=frame.f_lineno,
                function=code.co_name,
            )
        frame = frame.f_back
        walked += 1
    return None
