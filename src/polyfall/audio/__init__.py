"""Sound cues derived from engine state deltas."""

from .cues import Cue, select_cues
from .device import AudioDevice, AudioNotifier

__all__ = ["Cue", "select_cues", "AudioDevice", "AudioNotifier"]
