"""Step-by-step execution of an arrow program on a level grid.

A run moves the avatar one cell per instruction. Moves off the edge of the
grid are clamped (the avatar stays put on that axis). A move into an obstacle
stops the run at once with the avatar still on its previous cell; later
instructions are never looked at. When every instruction has been used the run
has succeeded if the avatar stands on the goal, otherwise it finished without
reaching it.

``ProgramRun.step`` performs exactly one instruction, so the caller decides the
pace: ``ExecutionEngine.run`` loops straight through, the UI calls ``step``
from a timer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Union

from shanshan.core.errors import EmptyProgram, LevelMismatch, LockedWhileRunning
from shanshan.core.feedback import FeedbackChannel, notify
from shanshan.core.levels import Level, Position
from shanshan.core.program import Instruction, Program, ProgramBuffer

logger = logging.getLogger(__name__)


class RunStatus(Enum):
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    CRASHED = "crashed"
    FINISHED_NO_GOAL = "finished_no_goal"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self is not RunStatus.RUNNING

    @property
    def is_failure(self) -> bool:
        return self in (RunStatus.CRASHED, RunStatus.FINISHED_NO_GOAL)


@dataclass(frozen=True)
class RunState:
    current_pos: Position
    cursor: int
    status: RunStatus


@dataclass(frozen=True)
class RunOutcome:
    """Result of a run. ``crash_step`` is set only for ``CRASHED``."""

    status: RunStatus
    final_position: Position
    crash_step: Optional[int] = None
    steps_taken: int = 0


def move(level: Level, pos: Position, instruction: Instruction) -> Position:
    """Cell reached from *pos* by *instruction*, clamped to the grid on each axis."""
    dx, dy = instruction.vector
    last = level.grid_size - 1
    return Position(
        max(0, min(last, pos.x + dx)),
        max(0, min(last, pos.y + dy)),
    )


OutcomeListener = Callable[[RunOutcome], None]


class ProgramRun:
    """A single run of a program, advanced one instruction at a time."""

    def __init__(
        self,
        level: Level,
        program: Program,
        feedback: Optional[FeedbackChannel] = None,
        on_release: Optional[Callable[[], None]] = None,
    ) -> None:
        self._level = level
        self._instructions = program.instructions
        self._feedback = feedback or FeedbackChannel()
        self._on_release = on_release
        self._listeners: List[OutcomeListener] = []
        self._pos = level.start
        self._cursor = 0
        self._status = RunStatus.RUNNING
        self._outcome: Optional[RunOutcome] = None

    @property
    def level(self) -> Level:
        return self._level

    @property
    def state(self) -> RunState:
        return RunState(current_pos=self._pos, cursor=self._cursor, status=self._status)

    @property
    def outcome(self) -> Optional[RunOutcome]:
        return self._outcome

    @property
    def is_finished(self) -> bool:
        return self._status.is_terminal

    def add_listener(self, listener: OutcomeListener) -> None:
        self._listeners.append(listener)

    def step(self) -> RunState:
        """Execute the instruction under the cursor. Does nothing once the run is over."""
        if self.is_finished:
            return self.state

        step_index = self._cursor
        instruction = self._instructions[step_index]
        notify(self._feedback, "on_step_started", step_index)

        candidate = move(self._level, self._pos, instruction)
        if self._level.is_blocked(candidate):
            logger.debug("Step %d (%s) hit obstacle at %s", step_index, instruction.name, candidate)
            notify(self._feedback, "on_crashed", step_index, self._pos)
            self._finish(RunStatus.CRASHED, crash_step=step_index)
            return self.state

        self._pos = candidate
        self._cursor += 1
        logger.debug("Step %d (%s) landed on %s", step_index, instruction.name, candidate)
        notify(self._feedback, "on_step_landed", candidate)

        if self._cursor == len(self._instructions):
            if self._pos == self._level.goal:
                self._finish(RunStatus.SUCCEEDED)
            else:
                notify(self._feedback, "on_goal_missed", self._pos)
                self._finish(RunStatus.FINISHED_NO_GOAL)
        return self.state

    def run_to_end(self, should_cancel: Optional[Callable[[], bool]] = None) -> RunOutcome:
        while not self.is_finished:
            if should_cancel is not None and should_cancel():
                self.cancel()
                break
            self.step()
        assert self._outcome is not None
        return self._outcome

    def cancel(self) -> None:
        """Stop between steps. No terminal feedback event is sent."""
        if self.is_finished:
            return
        logger.info("Run on %s cancelled at step %d", self._level.key, self._cursor)
        self._finish(RunStatus.ABORTED)

    def _finish(self, status: RunStatus, crash_step: Optional[int] = None) -> None:
        self._status = status
        self._outcome = RunOutcome(
            status=status,
            final_position=self._pos,
            crash_step=crash_step,
            steps_taken=self._cursor,
        )
        if status is not RunStatus.ABORTED:
            logger.info("Run on %s finished: %s at %s", self._level.key, status.value, self._pos)
        if self._on_release is not None:
            self._on_release()
        for listener in list(self._listeners):
            listener(self._outcome)


class ExecutionEngine:
    """Creates runs. Holds no state between runs."""

    def __init__(self, feedback: Optional[FeedbackChannel] = None) -> None:
        self._feedback = feedback or FeedbackChannel()

    def start(self, level: Level, program: Union[ProgramBuffer, Program]) -> ProgramRun:
        """Validate *program* against *level* and return a run positioned before step 0.

        Passing a ``ProgramBuffer`` locks it until the run finishes or is
        cancelled. Raises ``LockedWhileRunning`` if the buffer is already
        locked, ``LevelMismatch`` if it belongs to another level and
        ``EmptyProgram`` if it has no instructions.
        """
        buffer: Optional[ProgramBuffer] = None
        if isinstance(program, ProgramBuffer):
            buffer = program
            if buffer.is_locked:
                raise LockedWhileRunning("A run is already in progress for this program")
            program = buffer.snapshot()

        if program.level_key != level.key:
            raise LevelMismatch(
                f"Program written for level {program.level_key!r} cannot run on level {level.key!r}"
            )
        if program.is_empty():
            raise EmptyProgram("Add some arrows before running the program")

        on_release = None
        if buffer is not None:
            buffer._acquire()
            on_release = buffer._release
        logger.debug("Starting run on %s with %d instructions", level.key, len(program))
        return ProgramRun(level, program, feedback=self._feedback, on_release=on_release)

    def run(
        self,
        level: Level,
        program: Union[ProgramBuffer, Program],
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> RunOutcome:
        """Run *program* on *level* to completion without pausing between steps."""
        return self.start(level, program).run_to_end(should_cancel)
