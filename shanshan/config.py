"""Runtime settings read from ``SHANSHAN_*`` environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_STEP_DELAY_MS = 600


def _flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() not in ("0", "false", "no", "off")


def _int(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %d", name, value, default)
        return default
    return max(minimum, parsed)


@dataclass(frozen=True)
class GameSettings:
    unlock_all: bool = True
    step_delay_ms: int = DEFAULT_STEP_DELAY_MS
    levels_dir: Optional[Path] = None
    narration: bool = True
    sound: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "GameSettings":
        env = os.environ if env is None else env
        levels_dir = env.get("SHANSHAN_LEVELS_DIR")
        return cls(
            unlock_all=_flag(env, "SHANSHAN_UNLOCK_ALL", True),
            step_delay_ms=_int(env, "SHANSHAN_STEP_DELAY_MS", DEFAULT_STEP_DELAY_MS),
            levels_dir=Path(levels_dir).expanduser() if levels_dir else None,
            narration=_flag(env, "SHANSHAN_NARRATION", True),
            sound=_flag(env, "SHANSHAN_SOUND", True),
            log_level=(env.get("SHANSHAN_LOG_LEVEL") or "INFO").strip().upper(),
        )
