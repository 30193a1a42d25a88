"""Tests for shanshan.core.levels – level data, validation and YAML loading."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from shanshan.core.errors import MalformedLevel, OutOfRange
from shanshan.core.levels import (
    Level,
    LevelCatalog,
    Position,
    difficulty_stars,
    validate_level,
)


def _level(key="level1", grid_size=4, start=(0, 0), goal=(3, 0), obstacles=()) -> Level:
    return Level(
        key=key,
        name=key.title(),
        grid_size=grid_size,
        start=Position(*start),
        goal=Position(*goal),
        obstacles=frozenset(Position(*o) for o in obstacles),
    )


def _write_yaml(path: Path, data: dict) -> None:
    path.write_text(yaml.dump(data, allow_unicode=True, default_flow_style=False), encoding="utf-8")


@pytest.fixture()
def levels_dir(tmp_path: Path) -> Path:
    d = tmp_path / "data" / "levels"
    d.mkdir(parents=True)
    return d


# ---------------------------------------------------------------------------
# Position / Level dataclasses
# ---------------------------------------------------------------------------

class TestPosition:
    def test_equality_by_value(self):
        assert Position(1, 2) == Position(1, 2)
        assert Position(1, 2) != Position(2, 1)

    def test_hashable(self):
        assert len({Position(0, 0), Position(0, 0), Position(1, 0)}) == 2

    def test_inside(self):
        assert Position(0, 0).inside(1)
        assert Position(3, 3).inside(4)
        assert not Position(4, 0).inside(4)
        assert not Position(-1, 0).inside(4)


class TestLevelDataclass:
    def test_frozen(self):
        lv = _level()
        with pytest.raises(AttributeError):
            lv.grid_size = 9  # type: ignore[misc]

    def test_default_obstacles_empty(self):
        lv = Level(key="k", name="K", grid_size=3, start=Position(0, 0), goal=Position(2, 2))
        assert lv.obstacles == frozenset()

    def test_is_blocked(self):
        lv = _level(obstacles=[(1, 0)])
        assert lv.is_blocked(Position(1, 0))
        assert not lv.is_blocked(Position(2, 0))


# ---------------------------------------------------------------------------
# validate_level
# ---------------------------------------------------------------------------

class TestValidateLevel:
    def test_valid_level_returned(self):
        lv = _level(obstacles=[(1, 1)])
        assert validate_level(lv) is lv

    def test_zero_grid_rejected(self):
        with pytest.raises(MalformedLevel):
            validate_level(_level(grid_size=0, start=(0, 0), goal=(0, 0)))

    def test_start_outside_grid(self):
        with pytest.raises(MalformedLevel, match="start"):
            validate_level(_level(start=(4, 0)))

    def test_goal_outside_grid(self):
        with pytest.raises(MalformedLevel, match="goal"):
            validate_level(_level(goal=(0, -1)))

    def test_start_equals_goal(self):
        with pytest.raises(MalformedLevel, match="same cell"):
            validate_level(_level(start=(1, 1), goal=(1, 1)))

    def test_obstacle_on_start(self):
        with pytest.raises(MalformedLevel, match="start"):
            validate_level(_level(obstacles=[(0, 0)]))

    def test_obstacle_on_goal(self):
        with pytest.raises(MalformedLevel, match="goal"):
            validate_level(_level(obstacles=[(3, 0)]))

    def test_obstacle_outside_grid(self):
        with pytest.raises(MalformedLevel, match="obstacle"):
            validate_level(_level(obstacles=[(7, 7)]))


# ---------------------------------------------------------------------------
# LevelCatalog
# ---------------------------------------------------------------------------

class TestLevelCatalog:
    def test_get_and_length(self):
        a, b = _level("level1"), _level("level2")
        catalog = LevelCatalog([a, b])
        assert catalog.length() == 2
        assert len(catalog) == 2
        assert catalog.get(0) is a
        assert catalog.get(1) is b

    @pytest.mark.parametrize("index", [-1, 2, 10])
    def test_get_out_of_range(self, index: int):
        catalog = LevelCatalog([_level("level1"), _level("level2")])
        with pytest.raises(OutOfRange):
            catalog.get(index)

    def test_out_of_range_is_index_error(self):
        catalog = LevelCatalog([_level()])
        with pytest.raises(IndexError):
            catalog.get(1)

    def test_malformed_entry_rejects_whole_catalog(self):
        with pytest.raises(MalformedLevel):
            LevelCatalog([_level("level1"), _level("level2", obstacles=[(0, 0)])])

    def test_empty_catalog_rejected(self):
        with pytest.raises(MalformedLevel):
            LevelCatalog([])

    def test_all_returns_copy(self):
        catalog = LevelCatalog([_level()])
        levels = catalog.all()
        levels.clear()
        assert len(catalog) == 1

    def test_duplicate_key_rejected(self):
        with pytest.raises(MalformedLevel, match="duplicate"):
            LevelCatalog([_level("dup", grid_size=2, goal=(1, 0)), _level("dup", grid_size=6)])

    def test_builtin_keys_unique(self):
        keys = [lv.key for lv in LevelCatalog.builtin().all()]
        assert len(set(keys)) == len(keys)


# ---------------------------------------------------------------------------
# Loading from YAML
# ---------------------------------------------------------------------------

class TestLoadFromDirectory:
    def test_single_level(self, levels_dir: Path):
        _write_yaml(
            levels_dir / "level1.yaml",
            {"title": " Right ", "grid_size": 4, "start": [0, 1], "goal": [3, 1], "obstacles": [[1, 0]]},
        )
        catalog = LevelCatalog.from_directory(levels_dir)
        lv = catalog.get(0)
        assert lv.key == "level1"
        assert lv.name == "Right"
        assert lv.start == Position(0, 1)
        assert lv.goal == Position(3, 1)
        assert lv.obstacles == frozenset({Position(1, 0)})

    def test_numeric_sort_order(self, levels_dir: Path):
        for n in (10, 2, 1):
            _write_yaml(levels_dir / f"level{n}.yaml", {"title": str(n), "grid_size": 3, "start": [0, 0], "goal": [2, 2]})
        keys = [lv.key for lv in LevelCatalog.from_directory(levels_dir).all()]
        assert keys == ["level1", "level2", "level10"]

    def test_obstacles_optional(self, levels_dir: Path):
        _write_yaml(levels_dir / "level1.yaml", {"title": "T", "grid_size": 3, "start": [0, 0], "goal": [2, 2]})
        assert LevelCatalog.from_directory(levels_dir).get(0).obstacles == frozenset()

    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            LevelCatalog.from_directory(tmp_path / "missing")

    def test_empty_directory(self, levels_dir: Path):
        with pytest.raises(MalformedLevel, match="No level files"):
            LevelCatalog.from_directory(levels_dir)

    def test_missing_title(self, levels_dir: Path):
        _write_yaml(levels_dir / "level1.yaml", {"grid_size": 3, "start": [0, 0], "goal": [2, 2]})
        with pytest.raises(MalformedLevel, match="title"):
            LevelCatalog.from_directory(levels_dir)

    def test_bad_coordinate(self, levels_dir: Path):
        _write_yaml(levels_dir / "level1.yaml", {"title": "T", "grid_size": 3, "start": [0], "goal": [2, 2]})
        with pytest.raises(MalformedLevel, match="start"):
            LevelCatalog.from_directory(levels_dir)

    def test_not_a_mapping(self, levels_dir: Path):
        (levels_dir / "level1.yaml").write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(MalformedLevel, match="level1.yaml"):
            LevelCatalog.from_directory(levels_dir)

    def test_semantic_error_caught_at_load(self, levels_dir: Path):
        _write_yaml(
            levels_dir / "level1.yaml",
            {"title": "T", "grid_size": 3, "start": [0, 0], "goal": [2, 2], "obstacles": [[2, 2]]},
        )
        with pytest.raises(MalformedLevel, match="goal"):
            LevelCatalog.from_directory(levels_dir)


# ---------------------------------------------------------------------------
# Built-in content
# ---------------------------------------------------------------------------

class TestBuiltinCatalog:
    def test_thirty_levels(self):
        assert len(LevelCatalog.builtin()) == 30

    def test_every_level_valid(self):
        for lv in LevelCatalog.builtin().all():
            n = lv.grid_size
            assert lv.start.inside(n) and lv.goal.inside(n)
            assert all(o.inside(n) for o in lv.obstacles)
            assert lv.start not in lv.obstacles
            assert lv.goal not in lv.obstacles
            assert lv.start != lv.goal

    def test_first_level(self):
        lv = LevelCatalog.builtin().get(0)
        assert lv.grid_size == 4
        assert lv.start == Position(0, 1)
        assert lv.goal == Position(3, 1)
        assert lv.obstacles == frozenset()


class TestDifficultyStars:
    @pytest.mark.parametrize("index,expected", [(0, 1), (9, 1), (10, 2), (19, 2), (20, 3), (29, 3)])
    def test_thirty_levels(self, index: int, expected: int):
        assert difficulty_stars(index, 30) == expected

    def test_empty_catalog(self):
        assert difficulty_stars(0, 0) == 1
