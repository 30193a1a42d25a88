"""Exceptions raised for structural misuse of the game core.

Crashing into an obstacle or missing the goal are normal run outcomes and are
reported through ``RunOutcome``, never through these classes.
"""

from __future__ import annotations


class GameError(Exception):
    """Base class for every error raised by ``shanshan.core``."""


class OutOfRange(GameError, IndexError):
    """A level index outside ``0 <= index < len(catalog)``."""

    def __init__(self, index: int, length: int) -> None:
        super().__init__(f"Level index {index} out of range (catalog has {length} levels)")
        self.index = index
        self.length = length


class MalformedLevel(GameError, ValueError):
    """A level definition that breaks the grid/start/goal/obstacle invariants."""


class EmptyProgram(GameError, ValueError):
    """A run was requested with no instructions."""


class LockedWhileRunning(GameError, RuntimeError):
    """The program buffer was touched while a run owns it."""


class LevelMismatch(GameError, ValueError):
    """A program authored for one level was run against another."""


class InvalidTransition(GameError, RuntimeError):
    """A progression transition was requested from a phase that does not allow it."""
