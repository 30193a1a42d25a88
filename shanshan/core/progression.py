from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from shanshan.core.engine import ExecutionEngine, ProgramRun, RunOutcome, RunStatus
from shanshan.core.errors import InvalidTransition
from shanshan.core.feedback import FeedbackChannel, notify
from shanshan.core.levels import Level, LevelCatalog, Position
from shanshan.core.program import ProgramBuffer

logger = logging.getLogger(__name__)


class ProgressionPhase(Enum):
    IDLE = "idle"
    AWAITING_RUN = "awaiting_run"
    COMPLETED = "completed"
    ALL_LEVELS_CLEARED = "all_levels_cleared"


@dataclass
class ProgressionState:
    """Session-scoped progress: the active level and the highest level reached."""

    active_level_index: int = 0
    unlocked_up_to: int = 0

    def record_success(self, level_index: int, level_count: int) -> None:
        reached = min(level_index + 1, level_count - 1)
        self.unlocked_up_to = max(self.unlocked_up_to, reached)


@dataclass(frozen=True)
class ControllerState:
    phase: ProgressionPhase
    level_index: int
    unlocked_up_to: int
    is_running: bool = False


class ProgressionController:
    """Owns the active level, its program buffer and the learner's unlock progress.

    Run outcomes flow back here: success unlocks the next level and waits for
    ``advance``; a crash or a miss sends the avatar back to the start and keeps
    the program so the learner can tweak it.
    """

    def __init__(
        self,
        catalog: LevelCatalog,
        engine: Optional[ExecutionEngine] = None,
        feedback: Optional[FeedbackChannel] = None,
        unlock_all: bool = False,
    ) -> None:
        self._catalog = catalog
        self._feedback = feedback or FeedbackChannel()
        self._engine = engine or ExecutionEngine(self._feedback)
        self._unlock_all = unlock_all
        self._state = ProgressionState()
        self._phase = ProgressionPhase.IDLE
        self._active_run: Optional[ProgramRun] = None
        first = catalog.get(0)
        self._buffer = ProgramBuffer(first.key, self._feedback)
        self._avatar: Position = first.start

    @property
    def catalog(self) -> LevelCatalog:
        return self._catalog

    @property
    def active_level(self) -> Level:
        return self._catalog.get(self._state.active_level_index)

    @property
    def active_level_index(self) -> int:
        return self._state.active_level_index

    @property
    def unlocked_up_to(self) -> int:
        return self._state.unlocked_up_to

    @property
    def buffer(self) -> ProgramBuffer:
        return self._buffer

    @property
    def avatar_position(self) -> Position:
        return self._avatar

    @property
    def is_running(self) -> bool:
        return self._active_run is not None

    @property
    def accepts_edits(self) -> bool:
        """False while a run is in flight or the active level is already solved."""
        return not self.is_running and self._phase not in (
            ProgressionPhase.COMPLETED,
            ProgressionPhase.ALL_LEVELS_CLEARED,
        )

    def current_state(self) -> ControllerState:
        phase = self._phase
        if phase is ProgressionPhase.IDLE and len(self._buffer) > 0:
            phase = ProgressionPhase.AWAITING_RUN
        return ControllerState(
            phase=phase,
            level_index=self._state.active_level_index,
            unlocked_up_to=self._state.unlocked_up_to,
            is_running=self.is_running,
        )

    def is_unlocked(self, index: int) -> bool:
        return self._unlock_all or 0 <= index <= self._state.unlocked_up_to

    def select(self, level_index: int) -> Level:
        """Make *level_index* the active level with an empty program.

        An in-flight run is cancelled first. ``unlocked_up_to`` is left alone.
        The old buffer is replaced by a fresh one keyed to the new level;
        ``on_instructions_cleared`` is sent if the old one held instructions.
        """
        level = self._catalog.get(level_index)
        if self._active_run is not None:
            self._active_run.cancel()
        had_instructions = len(self._buffer) > 0
        self._state.active_level_index = level_index
        self._phase = ProgressionPhase.IDLE
        self._buffer = ProgramBuffer(level.key, self._feedback)
        self._avatar = level.start
        logger.info("Selected level %d (%s)", level_index, level.key)
        if had_instructions:
            notify(self._feedback, "on_instructions_cleared")
        return level

    def clear_program(self) -> None:
        self._buffer.clear()
        self._avatar = self.active_level.start

    def begin_run(self) -> ProgramRun:
        """Start a run of the current program; the caller steps it."""
        if self._phase in (ProgressionPhase.COMPLETED, ProgressionPhase.ALL_LEVELS_CLEARED):
            raise InvalidTransition(f"Level already solved ({self._phase.value}); advance or select a level")
        run = self._engine.start(self.active_level, self._buffer)
        run.add_listener(self._on_outcome)
        self._active_run = run
        return run

    def run(self, should_cancel: Optional[Callable[[], bool]] = None) -> RunOutcome:
        return self.begin_run().run_to_end(should_cancel)

    def advance(self) -> Level:
        """Move on from a solved level to the next one."""
        if self._phase is not ProgressionPhase.COMPLETED:
            raise InvalidTransition(f"Cannot advance from phase {self._phase.value}")
        return self.select(self._state.active_level_index + 1)

    def restart_session(self) -> Level:
        """Forget all progress and go back to the first level."""
        if self._active_run is not None:
            self._active_run.cancel()
        self._state = ProgressionState()
        logger.info("Session restarted")
        return self.select(0)

    def _on_outcome(self, outcome: RunOutcome) -> None:
        self._active_run = None
        level = self.active_level
        index = self._state.active_level_index

        if outcome.status is RunStatus.ABORTED:
            self._avatar = level.start
            return

        if outcome.status is RunStatus.SUCCEEDED:
            self._avatar = outcome.final_position
            self._state.record_success(index, len(self._catalog))
            notify(self._feedback, "on_succeeded", index)
            if index == len(self._catalog) - 1:
                self._phase = ProgressionPhase.ALL_LEVELS_CLEARED
                logger.info("All %d levels cleared", len(self._catalog))
                notify(self._feedback, "on_all_levels_cleared")
            else:
                self._phase = ProgressionPhase.COMPLETED
            return

        self._phase = ProgressionPhase.IDLE
        self._avatar = level.start
