from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, List, Tuple

import numpy as np


Coordinate = Tuple[int, int]


def _canonical(blocks: Iterable[Coordinate]) -> Tuple[Coordinate, ...]:
    # Row-major order so equal block sets compare equal
    return tuple(sorted(set(blocks), key=lambda c: (c[1], c[0])))


@dataclass(frozen=True)
class Piece:
    """A polyomino defined inside a size x size local frame.

    `blocks` are local (x, y) coordinates; every block shares `color`, an
    index into the configured palette. (`x`, `y`) is the anchor of the
    frame's top-left corner in field coordinates.
    """

    blocks: Tuple[Coordinate, ...]
    color: int
    size: int
    x: int = 0
    y: int = 0

    @classmethod
    def from_mask(cls, mask: np.ndarray, color: int, x: int = 0, y: int = 0) -> "Piece":
        ys, xs = np.nonzero(mask)
        blocks = _canonical(zip(xs.tolist(), ys.tolist()))
        return cls(blocks=blocks, color=int(color), size=int(mask.shape[0]), x=x, y=y)

    @property
    def cell_count(self) -> int:
        return len(self.blocks)

    def as_array(self) -> np.ndarray:
        mask = np.zeros((self.size, self.size), dtype=np.int8)
        for bx, by in self.blocks:
            mask[by, bx] = 1
        return mask

    def cells_at(self, origin_x: int, origin_y: int) -> List[Coordinate]:
        return [(origin_x + bx, origin_y + by) for bx, by in self.blocks]

    def cells(self) -> List[Coordinate]:
        return self.cells_at(self.x, self.y)

    def translated(self, dx: int, dy: int) -> "Piece":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def anchored(self, x: int, y: int) -> "Piece":
        return replace(self, x=x, y=y)

    def rotated_cw(self) -> "Piece":
        n = self.size - 1
        return replace(self, blocks=_canonical((n - by, bx) for bx, by in self.blocks))

    def rotated_ccw(self) -> "Piece":
        n = self.size - 1
        return replace(self, blocks=_canonical((by, n - bx) for bx, by in self.blocks))
