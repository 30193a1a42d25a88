"""Plays the synthesized cues from ``shanshan.ui.tones`` through ``QSoundEffect``."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from PySide6.QtCore import QObject, QUrl
from PySide6.QtMultimedia import QSoundEffect

from shanshan.ui.tones import CueFiles

logger = logging.getLogger(__name__)


class SoundBank(QObject):
    """Renders every cue once at start-up and plays them on request.

    The WAV files live in a temporary directory owned by the bank; ``close``
    stops playback and removes it.
    """

    def __init__(self, enabled: bool = True, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._enabled = enabled
        self._effects: Dict[str, QSoundEffect] = {}
        self._files: Optional[CueFiles] = None
        if not enabled:
            return
        self._files = CueFiles()
        for name, path in self._files.write_all().items():
            effect = QSoundEffect(self)
            effect.setSource(QUrl.fromLocalFile(str(path)))
            self._effects[name] = effect

    def play(self, name: str) -> None:
        if not self._enabled:
            return
        effect = self._effects.get(name)
        if effect is None:
            logger.debug("No sound loaded for cue %s", name)
            return
        effect.play()

    def close(self) -> None:
        for effect in self._effects.values():
            effect.stop()
        self._effects.clear()
        self._enabled = False
        if self._files is not None:
            self._files.cleanup()
            self._files = None
