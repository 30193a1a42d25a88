"""Spoken feedback through Qt's text-to-speech engine."""

from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from PySide6.QtCore import QLocale, QObject
from PySide6.QtTextToSpeech import QTextToSpeech

logger = logging.getLogger(__name__)

ENCOURAGING_PHRASES = (
    "真棒！",
    "好聪明！",
    "哇，太厉害了！",
    "做得好！",
    "完美的程序！",
    "你是天才！",
    "闪闪发光！",
    "继续加油！",
)

TRY_AGAIN_PHRASES = (
    "没关系，再试一次！",
    "哎呀，撞到了！",
    "加油，你可以的！",
    "稍微改一下就好啦！",
    "别灰心，再来！",
)

EMPTY_PROGRAM_PHRASE = "你需要先加一些箭头！"
GOAL_MISSED_PHRASE = "差点就到了！再试一次。"
NEXT_LEVEL_SUFFIX = " 下一关！"
START_GAME_PHRASE = "让我们写一个程序来拿到奖杯！"
ALL_CLEARED_PHRASE = "哇！不可思议！你通关了所有{count}个关卡！你是超级程序员！"
STORY_TEXT = "程序就是给电脑的魔法咒语 ✨ 一步一步告诉机器人怎么走，它就会乖乖听话！🤖"


def pick_phrase(phrases: Sequence[str], rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(phrases)


class Narrator(QObject):
    """Speaks short phrases. Never raises; a missing speech engine only logs."""

    def __init__(self, enabled: bool = True, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._speech: Optional[QTextToSpeech] = None
        if not enabled:
            return
        engines = QTextToSpeech.availableEngines()
        if not engines:
            logger.warning("No text-to-speech engine available; narration disabled")
            return
        self._speech = QTextToSpeech(self)
        self._speech.setLocale(QLocale("zh_CN"))
        self._speech.setRate(-0.1)
        self._speech.setPitch(0.1)
        self._speech.errorOccurred.connect(self._on_error)

    def say(self, text: str) -> None:
        logger.debug("Narrating: %s", text)
        if self._speech is None:
            return
        # Drop anything still queued so rapid clicks do not pile up.
        self._speech.stop()
        self._speech.say(text)

    def _on_error(self, reason, message: str) -> None:
        logger.warning("Text-to-speech error (%s): %s", reason, message)
