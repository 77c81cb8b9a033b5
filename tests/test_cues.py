from __future__ import annotations

from dataclasses import replace

import numpy as np
import pytest

from polyfall.audio import Cue, select_cues
from polyfall.game import Action, GameConfig, GameEngine, Piece

W, H = 20, 40
BAR = ((0, 0), (0, 1), (0, 2), (0, 3))


@pytest.fixture
def engine() -> GameEngine:
    return GameEngine(GameConfig(random_seed=5))


def resting_bar(engine, full_rows: int = 0, blocked_top: bool = False):
    grid = np.zeros((H, W), dtype=np.int8)
    if full_rows:
        grid[H - full_rows :, 1:] = 1
    if blocked_top:
        grid[:8, 1:] = 1
    grid.flags.writeable = False
    state = engine.create_initial_state()
    return replace(state, grid=grid, current_piece=Piece(blocks=BAR, color=0, size=4, x=0, y=H - 4))


def test_applied_move_plays_move(engine):
    state = engine.create_initial_state()
    outcome = engine.step(state, Action.LEFT)
    assert select_cues(state, outcome, Action.LEFT) == [Cue.MOVE]


def test_rejected_move_is_silent(engine):
    state = replace(engine.create_initial_state(), paused=True)
    outcome = engine.step(state, Action.RIGHT)
    assert select_cues(state, outcome, Action.RIGHT) == []


def test_rejected_hold_plays_error(engine):
    state = replace(engine.create_initial_state(), paused=True)
    outcome = engine.step(state, Action.HOLD)
    assert select_cues(state, outcome, Action.HOLD) == [Cue.ERROR]


def test_gravity_lock_with_clear(engine):
    state = resting_bar(engine, full_rows=1)
    outcome = engine.step(state, Action.SOFT_DROP)
    assert select_cues(state, outcome) == [Cue.CLEAR_1, Cue.LOCK]


def test_hard_drop_with_three_lines_levels_up(engine):
    state = resting_bar(engine, full_rows=3)
    outcome = engine.step(state, Action.HARD_DROP)
    assert select_cues(state, outcome, Action.HARD_DROP) == [
        Cue.DROP,
        Cue.CLEAR_3,
        Cue.LOCK,
        Cue.LEVEL_UP,
    ]


def test_game_over_transition(engine):
    state = resting_bar(engine, blocked_top=True)
    outcome = engine.step(state, Action.SOFT_DROP)
    cues = select_cues(state, outcome, Action.SOFT_DROP)
    assert cues[-1] == Cue.GAME_OVER
    assert Cue.LOCK in cues


def test_hard_drop_press_plays_drop_even_when_rejected(engine):
    state = replace(engine.create_initial_state(), paused=True)
    outcome = engine.step(state, Action.HARD_DROP)
    assert not outcome.applied
    assert select_cues(state, outcome, Action.HARD_DROP) == [Cue.DROP]
