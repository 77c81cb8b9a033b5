from __future__ import annotations

from typing import Optional, Tuple

import pygame

from polyfall.game import GameConfig, GameState


class GravityClock:
    """Posts `event_type` at the fall cadence of the current level.

    The timer is keyed on (level, paused, game_over). When the key changes the
    old timer is cancelled and its queued ticks are purged before a new one is
    started, so a stale cadence never fires.
    """

    def __init__(self, config: GameConfig, event_type: Optional[int] = None) -> None:
        self.config = config
        self.event_type = event_type if event_type is not None else pygame.USEREVENT + 1
        self._key: Optional[Tuple[int, bool, bool]] = None

    def sync(self, state: GameState) -> bool:
        """Recreate the timer if the key changed; returns True when it did."""
        key = (state.level, state.paused, state.game_over)
        if key == self._key:
            return False
        self.stop()
        self._key = key
        if not (state.paused or state.game_over):
            pygame.time.set_timer(self.event_type, self.config.fall_interval_ms(state.level))
        return True

    def stop(self) -> None:
        pygame.time.set_timer(self.event_type, 0)
        pygame.event.clear(self.event_type)
        self._key = None
