"""Shared fixtures: small hand-built levels and a feedback channel that records events."""

from __future__ import annotations

import pytest

from shanshan.core.feedback import FeedbackChannel
from shanshan.core.levels import Level, LevelCatalog, Position


class RecordingFeedback(FeedbackChannel):
    def __init__(self) -> None:
        self.events: list[tuple] = []

    def on_instruction_added(self, instruction):
        self.events.append(("added", instruction))

    def on_instructions_cleared(self):
        self.events.append(("cleared",))

    def on_step_started(self, step_index):
        self.events.append(("started", step_index))

    def on_step_landed(self, position):
        self.events.append(("landed", position))

    def on_crashed(self, step_index, position):
        self.events.append(("crashed", step_index, position))

    def on_goal_missed(self, final_position):
        self.events.append(("missed", final_position))

    def on_succeeded(self, level_index):
        self.events.append(("succeeded", level_index))

    def on_all_levels_cleared(self):
        self.events.append(("all_cleared",))

    def names(self) -> list[str]:
        return [e[0] for e in self.events]


class ExplodingFeedback(FeedbackChannel):
    """Every event raises, like a speech service that is down."""

    def __getattribute__(self, name):
        if name.startswith("on_"):
            def _boom(*args):
                raise RuntimeError(f"{name} unavailable")
            return _boom
        return super().__getattribute__(name)


def make_level(key="level1", grid_size=4, start=(0, 0), goal=(3, 0), obstacles=()) -> Level:
    return Level(
        key=key,
        name=key,
        grid_size=grid_size,
        start=Position(*start),
        goal=Position(*goal),
        obstacles=frozenset(Position(*o) for o in obstacles),
    )


@pytest.fixture()
def feedback() -> RecordingFeedback:
    return RecordingFeedback()


@pytest.fixture()
def three_level_catalog() -> LevelCatalog:
    return LevelCatalog(
        [
            make_level("level1", grid_size=4, start=(0, 1), goal=(3, 1)),
            make_level("level2", grid_size=4, start=(0, 0), goal=(2, 0), obstacles=[(1, 0)]),
            make_level("level3", grid_size=3, start=(0, 0), goal=(0, 2)),
        ]
    )
