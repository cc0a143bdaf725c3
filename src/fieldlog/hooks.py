"""
Hook registry.

Hooks are observers fired synchronously for each entry at a level they
declare interest in, after finalization and before serialization.

Hooks fire while the logger lock is held. A hook must not log through the
same Logger: the lock is not re-entrant and the call would deadlock.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable

from fieldlog.records import Level

if TYPE_CHECKING:
    from fieldlog.entry import Entry


class Hook(ABC):
    """Base hook. Subclasses pick their levels and react to entries."""

    @abstractmethod
    def levels(self) -> Iterable[Level]: ...

    @abstractmethod
    def fire(self, entry: "Entry") -> None:
        """React to an entry. Raising stops later hooks for this entry."""
        ...


class LevelHooks:
    """
    Level → hooks, in registration order.

    There is no removal; swap the whole registry with Logger.replace_hooks().
    """

    def __init__(self) -> None:
        self._hooks: dict[Level, list[Hook]] = {}

    def add(self, hook: Hook) -> None:
        """Register a hook under every level it declares."""
        for level in hook.levels():
            self._hooks.setdefault(Level(level), []).append(hook)

    def fire(self, level: Level, entry: "Entry") -> None:
        """
        Fire hooks registered at `level`, in order.

        The first hook to raise stops the rest; its exception propagates.
        """
        for hook in self._hooks.get(level, ()):
            hook.fire(entry)

    def hooks_for(self, level: Level) -> list[Hook]:
        return list(self._hooks.get(level, ()))

    def __len__(self) -> int:
        return sum(len(hooks) for hooks in self._hooks.values())

    def describe(self) -> dict:
        """Hook class names per level, for Logger.status()."""
        return {
            level.text: [type(hook).__name__ for hook in hooks]
            for level, hooks in sorted(self._hooks.items())
        }
