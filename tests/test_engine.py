from __future__ import annotations

from dataclasses import replace

import numpy as np
import pytest

from polyfall.game import Action, GameConfig, GameEngine, GameState, Piece
from polyfall.game.grid import cell_value

W, H = 20, 40
BAR = ((0, 0), (0, 1), (0, 2), (0, 3))
L_SHAPE = ((0, 0), (0, 1), (0, 2), (1, 2))


@pytest.fixture
def engine() -> GameEngine:
    return GameEngine(GameConfig(random_seed=42))


@pytest.fixture
def state(engine) -> GameState:
    return engine.create_initial_state()


def piece(blocks, x, y, size=4, color=0) -> Piece:
    return Piece(blocks=tuple(blocks), color=color, size=size, x=x, y=y)


def with_grid(state: GameState, grid: np.ndarray, current: Piece) -> GameState:
    grid = np.asarray(grid, dtype=np.int8)
    grid.flags.writeable = False
    return replace(state, grid=grid, current_piece=current)


def test_initial_state(state):
    assert state.grid.shape == (H, W)
    assert not state.grid.any()
    assert state.current_piece is not None
    assert state.next_piece is not None
    assert state.next_next_piece is not None
    assert state.hold_piece is None
    assert (state.score, state.level) == (0, 1)
    assert not state.game_over and not state.paused


def test_horizontal_moves(engine, state):
    x = state.current_piece.x
    assert engine.move_left(state).current_piece.x == x - 1
    assert engine.move_right(state).current_piece.x == x + 1


def test_blocked_move_returns_same_state(engine, state):
    s = with_grid(state, np.zeros((H, W)), piece(BAR, 0, 5))
    assert engine.move_left(s) is s
    assert engine.move_right(s) is not s


@pytest.mark.parametrize(
    "changes",
    [{"paused": True}, {"game_over": True}, {"current_piece": None}],
)
def test_guards_make_operations_noops(engine, state, changes):
    s = replace(state, **changes)
    for op in (
        engine.move_left,
        engine.move_right,
        engine.move_down_shift,
        engine.hard_drop,
        engine.rotate_clockwise,
        engine.rotate_counter_clockwise,
        engine.hold_piece,
    ):
        assert op(s) is s


def test_toggle_pause_twice_restores_flag(engine, state):
    paused = engine.toggle_pause(state)
    assert paused.paused
    resumed = engine.toggle_pause(paused)
    assert resumed.paused == state.paused
    assert resumed.grid is state.grid
    assert resumed.current_piece is state.current_piece
    assert resumed.score == state.score


def test_toggle_pause_has_no_game_over_guard(engine, state):
    over = replace(state, game_over=True)
    assert engine.toggle_pause(over).paused


def test_soft_drop_moves_down(engine, state):
    assert engine.move_down_shift(state).current_piece.y == state.current_piece.y + 1


def test_lock_with_single_line_clear_scores_110(engine, state):
    grid = np.zeros((H, W), dtype=np.int8)
    grid[H - 1, 1:] = 1
    s = with_grid(state, grid, piece(BAR, 0, H - 4))
    outcome = engine.step(s, Action.SOFT_DROP)
    after = outcome.state
    assert outcome.applied and outcome.locked
    assert outcome.lines_cleared == 1
    assert after.score == 110
    assert after.level == 1
    assert after.lines_cleared_total == 1
    assert after.pieces_placed == 1
    assert after.current_piece is s.next_piece
    assert after.next_piece is s.next_next_piece
    assert after.next_next_piece is not None
    assert not after.game_over
    # Remaining three bar cells dropped by one row
    assert list(after.grid[H - 3 :, 0]) == [cell_value(0)] * 3
    assert not after.grid[: H - 3].any()


def test_three_lines_raise_level(engine, state):
    grid = np.zeros((H, W), dtype=np.int8)
    grid[H - 3 :, 1:] = 1
    s = with_grid(state, grid, piece(BAR, 0, H - 4))
    after = engine.move_down_shift(s)
    assert after.score == 10 + 900
    assert after.level == 2
    assert after.lines_cleared_total == 3


def test_spawn_collision_ends_game(engine, state):
    grid = np.zeros((H, W), dtype=np.int8)
    grid[:8, 1:] = 1
    s = with_grid(state, grid, piece(BAR, 5, H - 4))
    after = engine.move_down_shift(s)
    assert after.game_over
    assert after.score == 10
    assert engine.move_left(after) is after
    assert engine.hard_drop(after) is after


def test_missing_next_piece_ends_game(engine, state):
    s = replace(with_grid(state, np.zeros((H, W)), piece(BAR, 5, H - 4)), next_piece=None)
    assert engine.move_down_shift(s).game_over


def test_hard_drop_lands_and_locks(engine, state):
    s = with_grid(state, np.zeros((H, W)), piece(BAR, 3, 0, color=2))
    after = engine.hard_drop(s)
    assert list(after.grid[H - 4 :, 3]) == [cell_value(2)] * 4
    assert np.count_nonzero(after.grid) == 4
    assert after.pieces_placed == 1
    assert after.score == 10
    assert after.current_piece is s.next_piece


def test_rotation_formula_and_round_trip(engine, state):
    s = with_grid(state, np.zeros((H, W)), piece(L_SHAPE, 8, 10))
    cw = engine.rotate_clockwise(s)
    assert set(cw.current_piece.blocks) == {(3, 0), (2, 0), (1, 0), (1, 1)}
    assert cw.current_piece.x == 8
    back = engine.rotate_counter_clockwise(cw)
    assert set(back.current_piece.blocks) == set(L_SHAPE)
    assert (back.current_piece.x, back.current_piece.y) == (8, 10)


def test_wall_kick_prefers_left_when_right_fails(engine, state):
    s = with_grid(state, np.zeros((H, W)), piece(BAR, 17, 5))
    rotated = engine.rotate_clockwise(s)
    assert rotated.current_piece.x == 16
    assert set(rotated.current_piece.blocks) == {(0, 0), (1, 0), (2, 0), (3, 0)}


def test_rotation_without_valid_kick_is_rejected(engine, state):
    grid = np.zeros((H, W), dtype=np.int8)
    grid[5, 16] = 1
    s = with_grid(state, grid, piece(BAR, 17, 5))
    assert engine.rotate_clockwise(s) is s


def test_wall_kick_tries_right_first(engine, state):
    grid = np.zeros((H, W), dtype=np.int8)
    grid[5, 8] = 1
    s = with_grid(state, grid, piece([(0, 0)], 5, 5))
    rotated = engine.rotate_clockwise(s)
    assert rotated.current_piece.x == 6
    assert rotated.current_piece.cells() == [(9, 5)]


def test_hold_with_empty_slot_advances_queue(engine, state):
    a, b, c = state.current_piece, state.next_piece, state.next_next_piece
    held = engine.hold_piece(state)
    assert held.hold_piece is a
    assert held.current_piece is b
    assert held.next_piece is c
    assert held.next_next_piece is not None and held.next_next_piece is not c


def test_hold_swaps_at_current_position(engine, state):
    first = engine.hold_piece(state)
    second = engine.hold_piece(first)
    active = first.current_piece
    assert second.hold_piece is active
    assert second.current_piece.blocks == state.current_piece.blocks
    assert (second.current_piece.x, second.current_piece.y) == (active.x, active.y)
    assert second.next_piece is first.next_piece


def test_blocked_hold_swap_is_rejected(engine, state):
    grid = np.zeros((H, W), dtype=np.int8)
    grid[0, 1] = 1
    s = replace(
        with_grid(state, grid, piece(BAR, 0, 0)),
        hold_piece=piece([(1, 0)], 12, 0),
    )
    assert engine.hold_piece(s) is s
    outcome = engine.step(s, Action.HOLD)
    assert not outcome.applied
    assert outcome.state is s


def test_step_reports_applied_and_unchanged(engine, state):
    assert engine.step(state, Action.LEFT).applied
    none = engine.step(state, Action.NONE)
    assert not none.applied and none.state is state
    assert engine.step(state, Action.PAUSE).state.paused


def test_can_apply_agrees_with_step(engine, state):
    s = with_grid(state, np.zeros((H, W)), piece(BAR, 0, 5))
    for action in (Action.LEFT, Action.RIGHT, Action.ROTATE_CW, Action.ROTATE_CCW):
        assert engine.can_apply(s, action) == engine.step(s, action).applied
    assert not engine.can_apply(replace(s, paused=True), Action.SOFT_DROP)


def test_reset_replaces_finished_game(engine, state):
    over = replace(state, game_over=True, score=500, level=4)
    fresh = engine.step(over, Action.RESET).state
    assert fresh is not over
    assert not fresh.game_over
    assert (fresh.score, fresh.level, fresh.hold_piece) == (0, 1, None)
    assert not fresh.grid.any()


def test_seeded_engines_are_reproducible():
    a = GameEngine(GameConfig(random_seed=7)).create_initial_state()
    b = GameEngine(GameConfig(random_seed=7)).create_initial_state()
    assert a.current_piece == b.current_piece
    assert a.next_next_piece == b.next_next_piece
