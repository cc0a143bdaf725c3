"""
Exit handlers run by Logger.exit() before a fatal termination.

A handler that raises is reported on stderr; the remaining handlers
still run.
"""

from __future__ import annotations

import sys
import threading
import traceback
from typing import Callable


_handlers: list[Callable[[], None]] = []
_handlers_lock = threading.Lock()


def register_exit_handler(handler: Callable[[], None]) -> None:
    """Append a handler; handlers run in registration order."""
    with _handlers_lock:
        _handlers.append(handler)


def defer_exit_handler(handler: Callable[[], None]) -> None:
    """Prepend a handler so it runs before those already registered."""
    with _handlers_lock:
        _handlers.insert(0, handler)


def run_exit_handlers() -> None:
    with _handlers_lock:
        handlers = list(_handlers)
    for handler in handlers:
        try:
            handler()
        except Exception as err:
            print(f"Error: Logger exit handler error: {err}", file=sys.stderr)
            traceback.print_exc(file=sys.stderr)


def clear_exit_handlers() -> None:
    """Drop all handlers. For testing only."""
    with _handlers_lock:
        _handlers.clear()
