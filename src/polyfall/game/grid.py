from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .pieces import Piece


EMPTY = 0


def cell_value(color: int) -> int:
    """Encode a palette index as an occupied cell (0 stays empty)."""
    return int(color) + 1


def _frozen(grid: np.ndarray) -> np.ndarray:
    grid.flags.writeable = False
    return grid


@dataclass
class ClearResult:
    grid: np.ndarray
    lines_cleared: int


def empty_grid(width: int, height: int) -> np.ndarray:
    """HEIGHT x WIDTH field of empty cells; row 0 is the top."""
    return _frozen(np.zeros((int(height), int(width)), dtype=np.int8))


def can_place(grid: np.ndarray, piece: Piece, dx: int = 0, dy: int = 0) -> bool:
    """True if every block of `piece` shifted by (dx, dy) fits the field.

    Cells above the field (y < 0) always fit so pieces may overhang the
    top while spawning.
    """
    height, width = grid.shape
    for x, y in piece.cells_at(piece.x + dx, piece.y + dy):
        if x < 0 or x >= width or y >= height:
            return False
        if y < 0:
            continue
        if grid[y, x] != EMPTY:
            return False
    return True


def lock(grid: np.ndarray, piece: Piece) -> np.ndarray:
    """Return a copy of `grid` with the piece's color written into its cells."""
    height, width = grid.shape
    locked = grid.copy()
    value = cell_value(piece.color)
    for x, y in piece.cells():
        if 0 <= y < height and 0 <= x < width:
            locked[y, x] = value
    return _frozen(locked)


def clear_lines(grid: np.ndarray) -> ClearResult:
    """Drop complete rows, keeping the rest in order under fresh empty rows."""
    full_rows = np.all(grid != EMPTY, axis=1)
    num = int(full_rows.sum())
    if num == 0:
        return ClearResult(grid=grid, lines_cleared=0)
    kept = grid[~full_rows]
    new_rows = np.zeros((num, grid.shape[1]), dtype=grid.dtype)
    return ClearResult(grid=_frozen(np.vstack((new_rows, kept))), lines_cleared=num)


def ghost_offset(grid: np.ndarray, piece: Piece) -> int:
    """Largest dy the piece can fall from its current position."""
    dy = 0
    while can_place(grid, piece, 0, dy + 1):
        dy += 1
    return dy


def get_max_height(grid: np.ndarray) -> int:
    # y=0 is top; find first non-empty from top
    non_empty_rows = np.where(np.any(grid != EMPTY, axis=1))[0]
    if non_empty_rows.size == 0:
        return 0
    return grid.shape[0] - int(non_empty_rows[0])


def count_holes(grid: np.ndarray) -> int:
    """Empty cells with at least one occupied cell above them in the column."""
    occupied = grid != EMPTY
    covered = np.logical_or.accumulate(occupied, axis=0)
    return int(np.count_nonzero(covered & ~occupied))
