"""Events the game core sends to the presentation layer.

Every call is fire-and-forget. A channel that raises is logged and ignored so
that narration, sound or rendering problems never change a run.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from shanshan.core.levels import Position
    from shanshan.core.program import Instruction

logger = logging.getLogger(__name__)


class FeedbackChannel:
    """No-op channel. Subclass and override the events you care about."""

    def on_instruction_added(self, instruction: "Instruction") -> None:
        pass

    def on_instructions_cleared(self) -> None:
        pass

    def on_step_started(self, step_index: int) -> None:
        pass

    def on_step_landed(self, position: "Position") -> None:
        pass

    def on_crashed(self, step_index: int, position: "Position") -> None:
        pass

    def on_goal_missed(self, final_position: "Position") -> None:
        pass

    def on_succeeded(self, level_index: int) -> None:
        pass

    def on_all_levels_cleared(self) -> None:
        pass


def notify(channel: FeedbackChannel, event: str, *args: Any) -> None:
    handler = getattr(channel, event)
    try:
        handler(*args)
    except Exception:
        logger.warning("Feedback handler %s failed", event, exc_info=True)
