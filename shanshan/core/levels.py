from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Tuple

import yaml

from shanshan.core.errors import MalformedLevel, OutOfRange

logger = logging.getLogger(__name__)

BUILTIN_LEVELS_DIR = Path(__file__).resolve().parent.parent / "data" / "levels"


@dataclass(frozen=True)
class Position:
    """Grid coordinate: ``x`` is the column (0 at left), ``y`` the row (0 at top)."""

    x: int
    y: int

    def inside(self, grid_size: int) -> bool:
        return 0 <= self.x < grid_size and 0 <= self.y < grid_size


@dataclass(frozen=True)
class Level:
    key: str
    name: str
    grid_size: int
    start: Position
    goal: Position
    obstacles: FrozenSet[Position] = field(default_factory=frozenset)

    def is_blocked(self, pos: Position) -> bool:
        return pos in self.obstacles


def validate_level(level: Level) -> Level:
    """Check the grid invariants of *level* and return it unchanged.

    Raises ``MalformedLevel`` when the grid is empty, when start, goal or an
    obstacle lies outside the grid, when start and goal coincide, or when an
    obstacle sits on the start or goal cell.
    """
    if not isinstance(level.grid_size, int) or level.grid_size < 1:
        raise MalformedLevel(f"{level.key}: grid_size must be a positive integer, got {level.grid_size!r}")
    if not level.start.inside(level.grid_size):
        raise MalformedLevel(f"{level.key}: start {level.start} outside {level.grid_size}x{level.grid_size} grid")
    if not level.goal.inside(level.grid_size):
        raise MalformedLevel(f"{level.key}: goal {level.goal} outside {level.grid_size}x{level.grid_size} grid")
    if level.start == level.goal:
        raise MalformedLevel(f"{level.key}: start and goal are the same cell {level.start}")
    for obstacle in level.obstacles:
        if not obstacle.inside(level.grid_size):
            raise MalformedLevel(f"{level.key}: obstacle {obstacle} outside {level.grid_size}x{level.grid_size} grid")
    if level.start in level.obstacles:
        raise MalformedLevel(f"{level.key}: obstacle placed on start {level.start}")
    if level.goal in level.obstacles:
        raise MalformedLevel(f"{level.key}: obstacle placed on goal {level.goal}")
    return level


def difficulty_stars(index: int, total: int) -> int:
    """Number of stars (1-3) shown for the level at *index* in a catalog of *total*."""
    if total <= 0:
        return 1
    return max(1, min(3, -(-(index + 1) * 3 // total)))


class LevelCatalog:
    """Ordered, read-only list of validated levels."""

    def __init__(self, levels: Iterable[Level]) -> None:
        self._levels: Tuple[Level, ...] = tuple(validate_level(level) for level in levels)
        if not self._levels:
            raise MalformedLevel("A level catalog needs at least one level")
        seen = set()
        for level in self._levels:
            if level.key in seen:
                raise MalformedLevel(f"{level.key}: duplicate level key")
            seen.add(level.key)

    @classmethod
    def from_directory(cls, base_dir: Path) -> "LevelCatalog":
        return cls(_load_levels(Path(base_dir)))

    @classmethod
    def builtin(cls, base_dir: Optional[Path] = None) -> "LevelCatalog":
        return cls.from_directory(base_dir or BUILTIN_LEVELS_DIR)

    def get(self, index: int) -> Level:
        if not isinstance(index, int) or not 0 <= index < len(self._levels):
            raise OutOfRange(index, len(self._levels))
        return self._levels[index]

    def length(self) -> int:
        return len(self._levels)

    def __len__(self) -> int:
        return len(self._levels)

    def all(self) -> List[Level]:
        return list(self._levels)


def _parse_position(source: str, label: str, raw: object) -> Position:
    if (
        not isinstance(raw, (list, tuple))
        or len(raw) != 2
        or not all(isinstance(v, int) and not isinstance(v, bool) for v in raw)
    ):
        raise MalformedLevel(f"{source}: '{label}' must be a pair of integers [x, y], got {raw!r}")
    return Position(raw[0], raw[1])


def _parse_level(key: str, source: str, raw: object) -> Level:
    if not raw or not isinstance(raw, dict):
        raise MalformedLevel(f"{source}: expected YAML mapping with 'title', 'grid_size', 'start' and 'goal'")
    title = raw.get("title")
    if not title or not isinstance(title, str):
        raise MalformedLevel(f"{source}: missing or invalid 'title'")
    grid_size = raw.get("grid_size")
    if not isinstance(grid_size, int) or isinstance(grid_size, bool):
        raise MalformedLevel(f"{source}: missing or invalid 'grid_size'")
    if "start" not in raw or "goal" not in raw:
        raise MalformedLevel(f"{source}: 'start' and 'goal' are required")
    start = _parse_position(source, "start", raw["start"])
    goal = _parse_position(source, "goal", raw["goal"])
    raw_obstacles = raw.get("obstacles") or []
    if not isinstance(raw_obstacles, list):
        raise MalformedLevel(f"{source}: 'obstacles' must be a list of [x, y] pairs")
    obstacles = frozenset(_parse_position(source, "obstacles", item) for item in raw_obstacles)
    return Level(
        key=key,
        name=title.strip(),
        grid_size=grid_size,
        start=start,
        goal=goal,
        obstacles=obstacles,
    )


def _sort_key(p: Path) -> tuple[int, str]:
    m = re.match(r"^level(\d+)$", p.stem)
    if m:
        return (int(m.group(1)), p.stem)
    return (10**9, p.stem)


def _load_levels(base_dir: Path) -> List[Level]:
    if not base_dir.exists():
        raise FileNotFoundError(f"Levels directory not found: {base_dir}")

    levels: List[Level] = []
    for level_path in sorted(base_dir.glob("level*.yaml"), key=_sort_key):
        try:
            raw = yaml.safe_load(level_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise MalformedLevel(f"{level_path.name}: invalid YAML: {e}") from e
        levels.append(_parse_level(level_path.stem, level_path.name, raw))

    if not levels:
        raise MalformedLevel(f"No level files (level*.yaml) found in {base_dir}")
    logger.info("Loaded %d levels from %s", len(levels), base_dir)
    return levels
