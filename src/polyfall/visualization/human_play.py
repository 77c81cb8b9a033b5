from __future__ import annotations

import argparse
import logging
from typing import Dict, Optional

import pygame

from polyfall.audio import AudioDevice, AudioNotifier, select_cues
from polyfall.game import Action, GameConfig, GameEngine, GameState
from .clock import GravityClock
from .renderer import Renderer


KEY_TO_ACTION: Dict[int, Action] = {
    pygame.K_LEFT: Action.LEFT,
    pygame.K_RIGHT: Action.RIGHT,
    pygame.K_DOWN: Action.SOFT_DROP,
    pygame.K_UP: Action.HARD_DROP,
    pygame.K_SPACE: Action.HARD_DROP,
    pygame.K_x: Action.ROTATE_CW,
    pygame.K_z: Action.ROTATE_CCW,
    pygame.K_c: Action.HOLD,
    pygame.K_LSHIFT: Action.HOLD,
    pygame.K_RSHIFT: Action.HOLD,
    pygame.K_p: Action.PAUSE,
    pygame.K_r: Action.RESET,
}


def dispatch(state: GameState, action: Action) -> Optional[Action]:
    """Filter an input action against the game flow; only reset works after game over."""
    if state.game_over and action != Action.RESET:
        return None
    return action


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Polyfall")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--cell-size", type=int, default=16)
    p.add_argument("--mute", action="store_true")
    p.add_argument("--log-level", default="WARNING")
    return p


def run() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=args.log_level.upper())

    config = GameConfig(random_seed=args.seed)
    engine = GameEngine(config)
    state = engine.create_initial_state()

    pygame.init()
    try:
        with AudioDevice(config.sound_volume, enabled=not args.mute) as device:
            notifier = AudioNotifier(device)
            renderer = Renderer(config.colors, cell_size=args.cell_size)
            screen = pygame.display.set_mode(renderer.window_size(state.grid))
            pygame.display.set_caption("Polyfall")
            gravity = GravityClock(config)
            clock = pygame.time.Clock()

            running = True
            while running:
                gravity.sync(state)
                restarted = False
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        running = False
                    elif event.type == pygame.KEYDOWN:
                        if event.key == pygame.K_ESCAPE:
                            running = False
                            continue
                        action = KEY_TO_ACTION.get(event.key)
                        if action is None or dispatch(state, action) is None:
                            continue
                        outcome = engine.step(state, action)
                        notifier.notify(select_cues(state, outcome, action))
                        state = outcome.state
                    elif event.type == gravity.event_type:
                        if restarted:
                            # Fetched before the timer was recreated
                            continue
                        outcome = engine.step(state, Action.SOFT_DROP)
                        notifier.notify(select_cues(state, outcome))
                        state = outcome.state
                    restarted = gravity.sync(state) or restarted

                renderer.draw(screen, state)
                clock.tick(60)
            gravity.stop()
    finally:
        pygame.quit()


if __name__ == "__main__":  # pragma: no cover
    run()
