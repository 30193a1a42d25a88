from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from shanshan.core.errors import LockedWhileRunning
from shanshan.core.feedback import FeedbackChannel, notify


class Instruction(Enum):
    """The four arrow blocks a learner can place. Values are ``(dx, dy)``; y grows downwards."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def vector(self) -> Tuple[int, int]:
        return self.value


@dataclass(frozen=True)
class Program:
    """Immutable copy of a buffer's instructions, tagged with the level it was written for."""

    level_key: str
    instructions: Tuple[Instruction, ...] = ()

    def __len__(self) -> int:
        return len(self.instructions)

    def is_empty(self) -> bool:
        return not self.instructions


class ProgramBuffer:
    """The instruction sequence a learner is building for one level.

    A run takes the buffer's lock for its whole duration; ``append`` and
    ``clear`` raise ``LockedWhileRunning`` while it is held.
    """

    def __init__(self, level_key: str, feedback: Optional[FeedbackChannel] = None) -> None:
        self._level_key = level_key
        self._feedback = feedback or FeedbackChannel()
        self._instructions: list[Instruction] = []
        self._locked = False

    @property
    def level_key(self) -> str:
        return self._level_key

    @property
    def is_locked(self) -> bool:
        return self._locked

    def __len__(self) -> int:
        return len(self._instructions)

    def append(self, instruction: Instruction) -> None:
        if self._locked:
            raise LockedWhileRunning("Cannot add instructions while the program is running")
        if not isinstance(instruction, Instruction):
            raise TypeError(f"Expected an Instruction, got {instruction!r}")
        self._instructions.append(instruction)
        notify(self._feedback, "on_instruction_added", instruction)

    def clear(self) -> None:
        if self._locked:
            raise LockedWhileRunning("Cannot clear the program while it is running")
        self._instructions.clear()
        notify(self._feedback, "on_instructions_cleared")

    def snapshot(self) -> Program:
        return Program(level_key=self._level_key, instructions=tuple(self._instructions))

    def _acquire(self) -> None:
        if self._locked:
            raise LockedWhileRunning("A run is already in progress for this program")
        self._locked = True

    def _release(self) -> None:
        self._locked = False
