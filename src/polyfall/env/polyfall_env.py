from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from polyfall.game import Action, GameConfig, GameEngine, GameState, Outcome, Piece
from polyfall.game.grid import count_holes, get_max_height


# Gameplay actions exposed to agents; pause and reset stay with the env API
ENV_ACTIONS: Tuple[Action, ...] = (
    Action.LEFT,
    Action.RIGHT,
    Action.ROTATE_CW,
    Action.ROTATE_CCW,
    Action.SOFT_DROP,
    Action.HARD_DROP,
    Action.NONE,
    Action.HOLD,
)


class PolyfallEnv(gym.Env):
    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 invalid_action_penalty: float = -0.1,
                 terminal_penalty: float = -10.0,
                 gravity_every: int = 4,
                 max_episode_steps: int = 10000) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.engine = GameEngine(self.config)
        self.state: GameState = self.engine.create_initial_state()
        self.render_mode = render_mode

        self.invalid_action_penalty = float(invalid_action_penalty)
        self.terminal_penalty = float(terminal_penalty)
        # Apply one gravity step every `gravity_every` agent steps (0 disables)
        self.gravity_every = int(gravity_every)
        self.max_episode_steps = int(max_episode_steps)
        self.reward_weights: Dict[str, float] = {
            # Positive components
            "score": 0.01,           # per engine score point
            "lines": 1.0,            # per line cleared
            # Negative components (penalize increases)
            "holes": 0.1,
            "height": 0.02,
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        h, w = self.config.height, self.config.width
        m = self.config.max_piece_size
        piece_box = spaces.Box(low=0, high=1, shape=(m, m), dtype=np.int8)
        # Grid: 1 locked cell, -1 falling piece overlay, 0 empty
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=-1, high=1, shape=(h, w), dtype=np.int8),
                "active": piece_box,
                "next": piece_box,
                "next_next": piece_box,
                "hold": piece_box,
                "level": spaces.Box(low=1, high=np.iinfo(np.int32).max, shape=(1,), dtype=np.int32),
            }
        )
        self.action_space = spaces.Discrete(len(ENV_ACTIONS))

        self._steps = 0

    def _piece_obs(self, piece: Optional[Piece]) -> np.ndarray:
        m = self.config.max_piece_size
        out = np.zeros((m, m), dtype=np.int8)
        if piece is not None:
            out[: piece.size, : piece.size] = piece.as_array()
        return out

    def _get_obs(self) -> Dict[str, Any]:
        state = self.state
        grid = (state.grid != 0).astype(np.int8)
        piece = state.current_piece
        if piece is not None and not state.game_over:
            for x, y in piece.cells():
                if 0 <= y < grid.shape[0] and 0 <= x < grid.shape[1]:
                    grid[y, x] = -1
        return {
            "grid": grid,
            "active": self._piece_obs(piece if not state.game_over else None),
            "next": self._piece_obs(state.next_piece),
            "next_next": self._piece_obs(state.next_next_piece),
            "hold": self._piece_obs(state.hold_piece),
            "level": np.array([state.level], dtype=np.int32),
        }

    def get_action_mask(self) -> np.ndarray:
        mask = np.array([self.engine.can_apply(self.state, a) for a in ENV_ACTIONS], dtype=np.bool_)
        mask[ENV_ACTIONS.index(Action.NONE)] = not self.state.game_over
        return mask

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": self.get_action_mask(),
            "score": self.state.score,
            "level": self.state.level,
            "lines_cleared": 0,
            "lines_cleared_total": self.state.lines_cleared_total,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.engine.rng.seed(seed)
        self.state = self.engine.reset()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        if self.state.game_over:
            return self._get_obs(), 0.0, True, False, self._get_info()

        before = self.state
        outcome = self.engine.step(before, ENV_ACTIONS[int(action)])
        lines = outcome.lines_cleared
        locked = outcome.locked
        self.state = outcome.state

        self._steps += 1
        if self.gravity_every > 0 and self._steps % self.gravity_every == 0:
            gravity: Outcome = self.engine.step(self.state, Action.SOFT_DROP)
            lines += gravity.lines_cleared
            locked = locked or gravity.locked
            self.state = gravity.state

        reward_components: Dict[str, float] = {}
        if not outcome.applied and ENV_ACTIONS[int(action)] != Action.NONE:
            reward_components["invalid"] = self.invalid_action_penalty
        reward_components["score"] = self.reward_weights["score"] * float(self.state.score - before.score)
        if locked:
            reward_components["lines"] = self.reward_weights["lines"] * float(lines)
            reward_components["holes"] = -self.reward_weights["holes"] * float(
                max(0, count_holes(self.state.grid) - count_holes(before.grid)))
            reward_components["height"] = -self.reward_weights["height"] * float(
                max(0, get_max_height(self.state.grid) - get_max_height(before.grid)))

        terminated = bool(self.state.game_over)
        truncated = self._steps >= self.max_episode_steps
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        reward = float(sum(reward_components.values()))
        info = self._get_info()
        info["reward_components"] = reward_components
        info["lines_cleared"] = lines
        info["engine_score_delta"] = float(self.state.score - before.score)
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        cell = 8
        palette = self.config.colors
        grid = self.state.grid
        h, w = grid.shape
        img = np.full((h * cell, w * cell, 3), 30, dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                v = int(grid[y, x])
                if v:
                    img[y * cell : (y + 1) * cell - 1, x * cell : (x + 1) * cell - 1, :] = palette[v - 1]
        piece = self.state.current_piece
        if piece is not None and not self.state.game_over:
            for x, y in piece.cells():
                if 0 <= y < h and 0 <= x < w:
                    img[y * cell : (y + 1) * cell - 1, x * cell : (x + 1) * cell - 1, :] = palette[piece.color]
        return img
