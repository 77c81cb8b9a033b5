from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Sequence, Tuple

import numpy as np
import pygame

from .cues import Cue


logger = logging.getLogger(__name__)

# (start seconds, duration seconds, start Hz, end Hz, waveform)
Note = Tuple[float, float, float, float, str]

C5, E5, G5, C6 = 523.25, 659.25, 783.99, 1046.50

CUE_NOTES: Dict[Cue, Sequence[Note]] = {
    Cue.MOVE: [(0.0, 0.05, 200, 200, "square")],
    Cue.DROP: [(0.0, 0.2, 400, 100, "sawtooth")],
    Cue.LOCK: [(0.0, 0.1, 150, 150, "square")],
    Cue.ERROR: [(0.0, 0.15, 110, 110, "square")],
    Cue.CLEAR_1: [(0.0, 0.3, f, f, "sine") for f in (C5,)],
    Cue.CLEAR_2: [(0.0, 0.3, f, f, "sine") for f in (C5, E5)],
    Cue.CLEAR_3: [(0.0, 0.3, f, f, "sine") for f in (C5, E5, G5)],
    Cue.CLEAR_4: [(0.0, 0.3, f, f, "sine") for f in (C5, E5, G5, C6)],
    Cue.LEVEL_UP: [(t, 0.15, f, f, "sine") for t, f in ((0.0, C5), (0.1, E5), (0.2, G5), (0.3, C6))],
    Cue.GAME_OVER: [
        (t, 0.3, f, f, "triangle")
        for t, f in ((0.0, 523.25), (0.15, 493.88), (0.3, 466.16), (0.45, 440.0), (0.6, 392.0))
    ],
}


def _wave(phase: np.ndarray, kind: str) -> np.ndarray:
    cycles = phase / (2 * np.pi)
    if kind == "square":
        return np.sign(np.sin(phase))
    if kind == "sawtooth":
        return 2.0 * (cycles - np.floor(cycles + 0.5))
    if kind == "triangle":
        return 2.0 * np.abs(2.0 * (cycles - np.floor(cycles + 0.5))) - 1.0
    return np.sin(phase)


def render_notes(notes: Iterable[Note], volume: float, sample_rate: int) -> np.ndarray:
    """Mix notes into one mono float buffer in [-1, 1]."""
    notes = list(notes)
    end = max(start + duration for start, duration, *_ in notes)
    out = np.zeros(int(end * sample_rate) + 1, dtype=np.float64)
    for start, duration, f0, f1, kind in notes:
        n = int(duration * sample_rate)
        t = np.arange(n) / sample_rate
        freq = f0 * (f1 / f0) ** (t / duration)
        phase = 2 * np.pi * np.cumsum(freq) / sample_rate
        # Exponential decay from `volume` down to 0.01
        envelope = volume * (0.01 / max(volume, 0.01)) ** (t / duration)
        offset = int(start * sample_rate)
        out[offset : offset + n] += _wave(phase, kind) * envelope
    return np.clip(out, -1.0, 1.0)


class AudioDevice:
    """Owned handle on the pygame mixer.

    Build one at startup, hand it to `AudioNotifier`, and `close()` it on
    shutdown. A disabled device (or one whose mixer failed to open) accepts
    every call and plays nothing.
    """

    def __init__(self, volume: float = 0.3, enabled: bool = True, sample_rate: int = 44100) -> None:
        self.volume = float(volume)
        self._sounds: Dict[Cue, pygame.mixer.Sound] = {}
        self._open = False
        if not enabled:
            return
        try:
            pygame.mixer.init(frequency=sample_rate, size=-16)
        except pygame.error as exc:
            logger.warning("audio disabled: %s", exc)
            return
        self._open = True
        frequency, _, channels = pygame.mixer.get_init()
        for cue, notes in CUE_NOTES.items():
            self._sounds[cue] = self._make_sound(notes, frequency, channels)

    def _make_sound(self, notes: Sequence[Note], frequency: int, channels: int) -> pygame.mixer.Sound:
        mono = (render_notes(notes, self.volume, frequency) * 32767).astype(np.int16)
        if channels == 1:
            return pygame.sndarray.make_sound(mono)
        samples = np.ascontiguousarray(np.repeat(mono[:, None], channels, axis=1))
        return pygame.sndarray.make_sound(samples)

    @property
    def is_open(self) -> bool:
        return self._open

    def play(self, cue: Cue) -> None:
        sound = self._sounds.get(cue)
        if sound is not None:
            sound.play()

    def close(self) -> None:
        if self._open:
            self._sounds.clear()
            pygame.mixer.quit()
            self._open = False

    def __enter__(self) -> "AudioDevice":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class AudioNotifier:
    def __init__(self, device: Optional[AudioDevice]) -> None:
        self.device = device

    def notify(self, cues: Iterable[Cue]) -> None:
        if self.device is None:
            return
        for cue in cues:
            self.device.play(cue)
