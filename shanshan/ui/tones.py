"""Short synthesized sound cues (click, step, bonk, win ...).

Each cue is a handful of decaying oscillator tones mixed into 16-bit mono
samples and written as a WAV file.
"""

from __future__ import annotations

import logging
import math
import struct
import tempfile
import wave
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence

logger = logging.getLogger(__name__)

SAMPLE_RATE = 22050


@dataclass(frozen=True)
class Tone:
    freq: float
    waveform: str  # sine, triangle, square or sawtooth
    duration: float
    start: float = 0.0
    volume: float = 0.1


CUES: Dict[str, Sequence[Tone]] = {
    "click": [Tone(800, "sine", 0.1)],
    "delete": [Tone(400, "triangle", 0.15)],
    "step": [Tone(600, "sine", 0.05, volume=0.05)],
    "bonk": [Tone(150, "sawtooth", 0.3), Tone(100, "square", 0.3)],
    "win": [
        Tone(523.25, "sine", 0.2, 0.0),
        Tone(659.25, "sine", 0.2, 0.1),
        Tone(783.99, "sine", 0.2, 0.2),
        Tone(1046.50, "sine", 0.4, 0.3),
    ],
    "victory": [
        Tone(523.25, "square", 0.1, 0.0),
        Tone(523.25, "square", 0.1, 0.1),
        Tone(523.25, "square", 0.1, 0.2),
        Tone(1046.50, "square", 0.6, 0.3),
        Tone(1567.98, "sine", 0.1, 0.4, 0.05),
        Tone(1975.53, "sine", 0.1, 0.5, 0.05),
    ],
}


def _oscillator(waveform: str, phase: float) -> float:
    """Value in [-1, 1] of *waveform* at *phase* (in cycles)."""
    frac = phase % 1.0
    if waveform == "sine":
        return math.sin(2 * math.pi * frac)
    if waveform == "square":
        return 1.0 if frac < 0.5 else -1.0
    if waveform == "sawtooth":
        return 2.0 * frac - 1.0
    if waveform == "triangle":
        return 4.0 * frac - 1.0 if frac < 0.5 else 3.0 - 4.0 * frac
    raise ValueError(f"Unknown waveform: {waveform}")


def render_tones(tones: Sequence[Tone], sample_rate: int = SAMPLE_RATE) -> List[int]:
    """Mix *tones* into signed 16-bit samples.

    Each tone's gain decays exponentially from its volume to 0.01 over its
    duration.
    """
    if not tones:
        return []
    total = max(t.start + t.duration for t in tones)
    mix = [0.0] * int(math.ceil(total * sample_rate))
    for tone in tones:
        first = int(tone.start * sample_rate)
        count = int(tone.duration * sample_rate)
        if count <= 0:
            continue
        decay = math.log(0.01 / tone.volume) / count if tone.volume > 0.01 else 0.0
        for i in range(count):
            idx = first + i
            if idx >= len(mix):
                break
            gain = tone.volume * math.exp(decay * i)
            mix[idx] += gain * _oscillator(tone.waveform, tone.freq * i / sample_rate)
    return [max(-32768, min(32767, int(v * 32767))) for v in mix]


def write_wav(path: Path, samples: Sequence[int], sample_rate: int = SAMPLE_RATE) -> None:
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(struct.pack(f"<{len(samples)}h", *samples))


class CueFiles:
    """WAV renderings of ``CUES`` in a temporary directory removed by ``cleanup``."""

    def __init__(self) -> None:
        self._tmp = tempfile.TemporaryDirectory(prefix="shanshan-sounds-")
        self.directory = Path(self._tmp.name)

    def write_all(self) -> Dict[str, Path]:
        """Render every cue; cues that cannot be written are logged and skipped."""
        paths: Dict[str, Path] = {}
        for name, tones in CUES.items():
            path = self.directory / f"{name}.wav"
            try:
                write_wav(path, render_tones(tones))
            except OSError as e:
                logger.warning("Could not write sound %s to %s: %s", name, path, e)
                continue
            paths[name] = path
        return paths

    def cleanup(self) -> None:
        self._tmp.cleanup()
