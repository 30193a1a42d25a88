"""Qt implementation of the core feedback channel: sound cues, narration and signals."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QObject, QTimer, Signal

from shanshan.core.feedback import FeedbackChannel
from shanshan.core.levels import Position
from shanshan.core.program import Instruction
from shanshan.ui.narration import (
    ALL_CLEARED_PHRASE,
    ENCOURAGING_PHRASES,
    GOAL_MISSED_PHRASE,
    NEXT_LEVEL_SUFFIX,
    TRY_AGAIN_PHRASES,
    Narrator,
    pick_phrase,
)
from shanshan.ui.sounds import SoundBank


class QtFeedbackChannel(QObject, FeedbackChannel):
    """Plays a cue for every engine event and re-emits it as a Qt signal for the window."""

    step_started = Signal(int)
    step_landed = Signal(object)
    crashed = Signal(int, object)
    goal_missed = Signal(object)
    succeeded = Signal(int)
    all_levels_cleared = Signal()
    program_changed = Signal()

    def __init__(
        self,
        narrator: Narrator,
        sounds: SoundBank,
        level_count: int,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._narrator = narrator
        self._sounds = sounds
        self._level_count = level_count

    def on_instruction_added(self, instruction: Instruction) -> None:
        self._sounds.play("click")
        self.program_changed.emit()

    def on_instructions_cleared(self) -> None:
        self._sounds.play("delete")
        self.program_changed.emit()

    def on_step_started(self, step_index: int) -> None:
        self._sounds.play("step")
        self.step_started.emit(step_index)

    def on_step_landed(self, position: Position) -> None:
        self.step_landed.emit(position)

    def on_crashed(self, step_index: int, position: Position) -> None:
        self._sounds.play("bonk")
        self._narrator.say(pick_phrase(TRY_AGAIN_PHRASES))
        self.crashed.emit(step_index, position)

    def on_goal_missed(self, final_position: Position) -> None:
        self._narrator.say(GOAL_MISSED_PHRASE)
        self.goal_missed.emit(final_position)

    def on_succeeded(self, level_index: int) -> None:
        if level_index < self._level_count - 1:
            self._sounds.play("win")
            phrase = pick_phrase(ENCOURAGING_PHRASES) + NEXT_LEVEL_SUFFIX
            # let the win jingle sparkle before speaking
            QTimer.singleShot(500, lambda: self._narrator.say(phrase))
        self.succeeded.emit(level_index)

    def on_all_levels_cleared(self) -> None:
        self._sounds.play("victory")
        self._narrator.say(ALL_CLEARED_PHRASE.format(count=self._level_count))
        self.all_levels_cleared.emit()
