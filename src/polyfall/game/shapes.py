"""Random polyomino synthesis.

Shapes are grown by a biased random walk inside an n x n frame and then
validated with two flood fills: the filled cells must form one 4-connected
component, and every empty cell must be reachable from the frame border
(no enclosed holes). Rejected walks are discarded and regrown from a new
seed.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .config import GameConfig
from .pieces import Coordinate, Piece


logger = logging.getLogger(__name__)

DIRECTIONS: Tuple[Coordinate, ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))

# (cumulative probability, step length)
STEP_LENGTHS: Tuple[Tuple[float, int], ...] = ((0.3, 1), (0.6, 2), (0.85, 3), (1.0, 4))
RECENT_CELLS = 3
RECENT_BIAS = 0.8
KEEP_DIRECTION = 0.6
BRANCH_CHANCE = 0.1


def fill_bounds(size: int) -> Tuple[int, int]:
    """Inclusive (min, max) filled-cell count for an n x n frame."""
    total = size * size
    low = -(-total // 3)
    high = min(total, -(-total * 7 // 10))
    return low, high


def flood_fill(grid: np.ndarray, seeds: Iterable[Coordinate], target: bool) -> np.ndarray:
    """Mark every cell equal to `target` that is 4-reachable from `seeds`."""
    h, w = grid.shape
    visited = np.zeros((h, w), dtype=bool)
    queue: deque = deque()
    for x, y in seeds:
        if 0 <= x < w and 0 <= y < h and bool(grid[y, x]) == target and not visited[y, x]:
            visited[y, x] = True
            queue.append((x, y))
    while queue:
        x, y = queue.popleft()
        for dx, dy in DIRECTIONS:
            nx, ny = x + dx, y + dy
            if 0 <= nx < w and 0 <= ny < h and not visited[ny, nx] and bool(grid[ny, nx]) == target:
                visited[ny, nx] = True
                queue.append((nx, ny))
    return visited


def is_connected(grid: np.ndarray) -> bool:
    filled = np.argwhere(grid)
    if filled.size == 0:
        return False
    y, x = (int(v) for v in filled[0])
    reached = flood_fill(grid, [(x, y)], True)
    return int(reached.sum()) == int(filled.shape[0])


def has_holes(grid: np.ndarray) -> bool:
    h, w = grid.shape
    border = [(x, y) for y in range(h) for x in range(w) if x in (0, w - 1) or y in (0, h - 1)]
    outside = flood_fill(grid, border, False)
    enclosed = ~grid.astype(bool) & ~outside
    return bool(enclosed.any())


def is_valid_shape(grid: np.ndarray, min_filled: int = 1) -> bool:
    return int(np.count_nonzero(grid)) >= min_filled and is_connected(grid) and not has_holes(grid)


def fallback_mask(size: int) -> np.ndarray:
    """Deterministic shape: the first min-fill cells in row-major order."""
    low, _ = fill_bounds(size)
    mask = np.zeros(size * size, dtype=bool)
    mask[:low] = True
    return mask.reshape(size, size)


class ShapeGenerator:
    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or GameConfig()
        self.rng = rng or random.Random(self.config.random_seed)

    def random_size(self) -> int:
        """Pick a frame size; each step up in size is one weight less likely."""
        sizes = list(range(self.config.min_piece_size, self.config.max_piece_size + 1))
        weights = [len(sizes) - i for i in range(len(sizes))]
        return self.rng.choices(sizes, weights=weights, k=1)[0]

    def next_piece(self) -> Piece:
        return self.generate(self.random_size())

    def generate(self, size: int) -> Piece:
        if not 1 <= size <= self.config.width:
            raise ValueError(f"piece size must be in [1, {self.config.width}], got {size}")
        low, _ = fill_bounds(size)
        attempts = self.config.max_generation_attempts
        for attempt in range(1, attempts + 1):
            mask = self.random_walk(size)
            if is_valid_shape(mask, low):
                logger.debug("generated %dx%d shape after %d attempt(s)", size, size, attempt)
                break
        else:
            logger.warning("no valid %dx%d shape in %d attempts, using fallback", size, size, attempts)
            mask = fallback_mask(size)
        color = self.rng.randrange(len(self.config.colors))
        return Piece.from_mask(mask, color, x=self.config.spawn_x(size), y=0)

    def random_walk(self, size: int) -> np.ndarray:
        rng = self.rng
        grid = np.zeros((size, size), dtype=bool)
        low, high = fill_bounds(size)
        target = rng.randint(low, high)

        x, y = rng.randrange(size), rng.randrange(size)
        grid[y, x] = True
        cells: List[Coordinate] = [(x, y)]
        last_direction: Optional[Coordinate] = None

        attempts = 0
        while len(cells) < target and attempts < target * 10:
            attempts += 1
            if rng.random() < RECENT_BIAS:
                index = max(0, len(cells) - rng.randrange(RECENT_CELLS) - 1)
            else:
                index = rng.randrange(len(cells))
            cx, cy = cells[index]

            if last_direction is not None and rng.random() < KEEP_DIRECTION:
                dx, dy = last_direction
            else:
                dx, dy = rng.choice(DIRECTIONS)
            step = self._step_length()

            nx, ny = cx + dx * step, cy + dy * step
            if 0 <= nx < size and 0 <= ny < size and not grid[ny, nx]:
                grid[ny, nx] = True
                cells.append((nx, ny))
                last_direction = (dx, dy)
                if rng.random() < BRANCH_CHANCE and len(cells) < target:
                    bdx, bdy = rng.choice(DIRECTIONS)
                    bx, by = nx + bdx, ny + bdy
                    if 0 <= bx < size and 0 <= by < size and not grid[by, bx]:
                        grid[by, bx] = True
                        cells.append((bx, by))
            else:
                last_direction = None
        return grid

    def _step_length(self) -> int:
        roll = self.rng.random()
        for threshold, length in STEP_LENGTHS:
            if roll < threshold:
                return length
        return STEP_LENGTHS[-1][1]
