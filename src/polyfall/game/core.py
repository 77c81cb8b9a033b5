from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Optional

import numpy as np

from .config import GameConfig
from .grid import can_place, clear_lines, empty_grid, ghost_offset, lock
from .pieces import Piece
from .rules import ScoringRules
from .shapes import ShapeGenerator


logger = logging.getLogger(__name__)


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE_CW = 2
    ROTATE_CCW = 3
    SOFT_DROP = 4
    HARD_DROP = 5
    NONE = 6
    HOLD = 7
    PAUSE = 8
    RESET = 9


@dataclass(frozen=True, eq=False)
class GameState:
    """Immutable snapshot of one game.

    Transitions never modify a snapshot; they return a new one, or the very
    same object when the operation was rejected.
    """

    grid: np.ndarray
    current_piece: Optional[Piece]
    next_piece: Optional[Piece]
    next_next_piece: Optional[Piece]
    hold_piece: Optional[Piece] = None
    score: int = 0
    level: int = 1
    game_over: bool = False
    paused: bool = False
    lines_cleared_total: int = 0
    pieces_placed: int = 0


@dataclass(frozen=True, eq=False)
class Outcome:
    """Tagged result of a transition: unchanged, or applied with a new state."""

    state: GameState
    applied: bool
    locked: bool = False
    lines_cleared: int = 0

    @classmethod
    def unchanged(cls, state: GameState) -> "Outcome":
        return cls(state=state, applied=False)

    @classmethod
    def changed(cls, state: GameState, locked: bool = False, lines_cleared: int = 0) -> "Outcome":
        return cls(state=state, applied=True, locked=locked, lines_cleared=lines_cleared)


KICK_OFFSETS = (1, -1, 2, -2)


class GameEngine:
    """Pure transition functions over `GameState` snapshots.

    The engine holds only static collaborators (config, scoring rules and the
    shape generator with its random stream); all game data lives in the
    snapshots passed in and returned.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        generator: Optional[ShapeGenerator] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rng = random.Random(self.config.random_seed)
        self.generator = generator or ShapeGenerator(self.config, self.rng)

    def create_initial_state(self) -> GameState:
        return GameState(
            grid=empty_grid(self.config.width, self.config.height),
            current_piece=self.generator.next_piece(),
            next_piece=self.generator.next_piece(),
            next_next_piece=self.generator.next_piece(),
        )

    def reset(self) -> GameState:
        return self.create_initial_state()

    @staticmethod
    def _inactive(state: GameState) -> bool:
        return state.current_piece is None or state.game_over or state.paused

    # ---------- Movement ----------
    def move_left(self, state: GameState) -> GameState:
        return self._shift(state, -1)

    def move_right(self, state: GameState) -> GameState:
        return self._shift(state, 1)

    def _shift(self, state: GameState, dx: int) -> GameState:
        if self._inactive(state):
            return state
        piece = state.current_piece
        if can_place(state.grid, piece, dx, 0):
            return replace(state, current_piece=piece.translated(dx, 0))
        return state

    def move_down_shift(self, state: GameState) -> GameState:
        return self._move_down(state).state

    def _move_down(self, state: GameState) -> Outcome:
        if self._inactive(state):
            return Outcome.unchanged(state)
        piece = state.current_piece
        if can_place(state.grid, piece, 0, 1):
            return Outcome.changed(replace(state, current_piece=piece.translated(0, 1)))
        return self._lock_and_advance(state)

    def hard_drop(self, state: GameState) -> GameState:
        return self._hard_drop(state).state

    def _hard_drop(self, state: GameState) -> Outcome:
        if self._inactive(state):
            return Outcome.unchanged(state)
        piece = state.current_piece
        landed = piece.translated(0, ghost_offset(state.grid, piece))
        return self._lock_and_advance(replace(state, current_piece=landed))

    def _lock_and_advance(self, state: GameState) -> Outcome:
        locked = lock(state.grid, state.current_piece)
        cleared = clear_lines(locked)
        lines = cleared.lines_cleared

        new_current = state.next_piece
        game_over = new_current is None or not can_place(cleared.grid, new_current)
        level = self.rules.next_level(state.level, lines)
        score = state.score + self.rules.score_delta(lines, state.level)

        logger.debug("locked piece, %d line(s) cleared", lines)
        if level != state.level:
            logger.info("level up: %d -> %d", state.level, level)
        if game_over:
            logger.info("game over with score %d", score)

        new_state = replace(
            state,
            grid=cleared.grid,
            current_piece=new_current,
            next_piece=state.next_next_piece,
            next_next_piece=self.generator.next_piece(),
            score=score,
            level=level,
            game_over=game_over,
            lines_cleared_total=state.lines_cleared_total + lines,
            pieces_placed=state.pieces_placed + 1,
        )
        return Outcome.changed(new_state, locked=True, lines_cleared=lines)

    # ---------- Rotation ----------
    def rotate_clockwise(self, state: GameState) -> GameState:
        if self._inactive(state):
            return state
        return self._rotate(state, state.current_piece.rotated_cw())

    def rotate_counter_clockwise(self, state: GameState) -> GameState:
        if self._inactive(state):
            return state
        return self._rotate(state, state.current_piece.rotated_ccw())

    def _rotate(self, state: GameState, rotated: Piece) -> GameState:
        if can_place(state.grid, rotated):
            return replace(state, current_piece=rotated)
        # Wall kicks: right before left, nearer before farther
        for offset in KICK_OFFSETS:
            if can_place(state.grid, rotated, offset, 0):
                return replace(state, current_piece=rotated.translated(offset, 0))
        return state

    # ---------- Hold / pause ----------
    def hold_piece(self, state: GameState) -> GameState:
        if self._inactive(state):
            return state
        current = state.current_piece
        if state.hold_piece is not None:
            candidate = state.hold_piece.anchored(current.x, current.y)
            if not can_place(state.grid, candidate):
                return state
            return replace(state, current_piece=candidate, hold_piece=current)
        return replace(
            state,
            current_piece=state.next_piece,
            next_piece=state.next_next_piece,
            next_next_piece=self.generator.next_piece(),
            hold_piece=current,
        )

    def toggle_pause(self, state: GameState) -> GameState:
        return replace(state, paused=not state.paused)

    # ---------- Dispatch ----------
    def step(self, state: GameState, action: Action) -> Outcome:
        action = Action(action)
        if action == Action.SOFT_DROP:
            return self._move_down(state)
        if action == Action.HARD_DROP:
            return self._hard_drop(state)
        if action == Action.RESET:
            return Outcome.changed(self.reset())
        if action == Action.NONE:
            return Outcome.unchanged(state)

        transitions = {
            Action.LEFT: self.move_left,
            Action.RIGHT: self.move_right,
            Action.ROTATE_CW: self.rotate_clockwise,
            Action.ROTATE_CCW: self.rotate_counter_clockwise,
            Action.HOLD: self.hold_piece,
            Action.PAUSE: self.toggle_pause,
        }
        new_state = transitions[action](state)
        if new_state is state:
            return Outcome.unchanged(state)
        return Outcome.changed(new_state)

    def can_apply(self, state: GameState, action: Action) -> bool:
        """Whether `step` would apply `action`, without drawing new pieces."""
        action = Action(action)
        if action in (Action.PAUSE, Action.RESET):
            return True
        if action == Action.NONE or self._inactive(state):
            return False
        if action in (Action.SOFT_DROP, Action.HARD_DROP):
            return True
        if action == Action.HOLD:
            if state.hold_piece is None:
                return True
            current = state.current_piece
            return can_place(state.grid, state.hold_piece.anchored(current.x, current.y))
        return self.step(state, action).applied
