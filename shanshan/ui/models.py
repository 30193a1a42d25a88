"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass

from shanshan.core.levels import Level, difficulty_stars
from shanshan.core.progression import ProgressionController


@dataclass
class LevelState:
    """UI state for a single level card: unlock status, selection and difficulty."""

    level: Level
    index: int
    unlocked: bool
    stars: int
    is_current: bool = False


def build_level_states(controller: ProgressionController) -> list[LevelState]:
    """Compute the level-select card state for every level in the catalog."""
    levels = controller.catalog.all()
    total = len(levels)
    return [
        LevelState(
            level=level,
            index=idx,
            unlocked=controller.is_unlocked(idx),
            stars=difficulty_stars(idx, total),
            is_current=idx == controller.active_level_index,
        )
        for idx, level in enumerate(levels)
    ]
