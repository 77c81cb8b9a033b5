from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np
import pygame

from polyfall.game import GameState, Piece, ghost_offset
from polyfall.game.config import Color


BACKGROUND = (10, 10, 14)
FIELD_BG = (30, 30, 36)
EMPTY_CELL = (20, 20, 26)
TEXT = (230, 230, 230)


def _color_for_value(v: int, palette: Sequence[Color]) -> Tuple[int, int, int]:
    if v == 0:
        return EMPTY_CELL
    return tuple(palette[(abs(v) - 1) % len(palette)])


class Renderer:
    """Draws read-only `GameState` snapshots; never mutates them."""

    def __init__(self, palette: Sequence[Color], cell_size: int = 16, margin: int = 20, panel_width: int = 180) -> None:
        self.palette = palette
        self.cell_size = cell_size
        self.margin = margin
        self.panel_width = panel_width
        self.font: Optional[pygame.font.Font] = None

    def window_size(self, grid: np.ndarray) -> Tuple[int, int]:
        h, w = grid.shape
        return (
            w * self.cell_size + self.margin * 3 + self.panel_width,
            h * self.cell_size + self.margin * 2,
        )

    def _cell_rect(self, x: int, y: int) -> pygame.Rect:
        return pygame.Rect(
            self.margin + x * self.cell_size,
            self.margin + y * self.cell_size,
            self.cell_size - 1,
            self.cell_size - 1,
        )

    def _grid_surface(self, grid: np.ndarray) -> pygame.Surface:
        h, w = grid.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill(FIELD_BG)
        for y in range(h):
            for x in range(w):
                rect = pygame.Rect(x * self.cell_size, y * self.cell_size, self.cell_size - 1, self.cell_size - 1)
                pygame.draw.rect(surf, _color_for_value(int(grid[y, x]), self.palette), rect)
        return surf

    def _draw_piece(self, screen: pygame.Surface, piece: Piece, grid: np.ndarray, outline: bool = False) -> None:
        h, w = grid.shape
        color = self.palette[piece.color]
        for x, y in piece.cells():
            if 0 <= x < w and 0 <= y < h:
                pygame.draw.rect(screen, color, self._cell_rect(x, y), 2 if outline else 0)

    def _draw_preview(self, screen: pygame.Surface, piece: Optional[Piece], label: str, x0: int, y0: int) -> int:
        small = max(4, self.cell_size // 2)
        screen.blit(self.font.render(label, True, TEXT), (x0, y0))
        y0 += 20
        if piece is not None:
            color = self.palette[piece.color]
            for bx, by in piece.blocks:
                rect = pygame.Rect(x0 + bx * small, y0 + by * small, small - 1, small - 1)
                pygame.draw.rect(screen, color, rect)
            return y0 + piece.size * small + 12
        return y0 + 12

    def draw(self, screen: pygame.Surface, state: GameState) -> None:
        if self.font is None:
            self.font = pygame.font.SysFont(None, 24)
        grid = state.grid
        screen.fill(BACKGROUND)
        screen.blit(self._grid_surface(grid), (self.margin, self.margin))

        piece = state.current_piece
        if piece is not None and not state.game_over:
            ghost = piece.translated(0, ghost_offset(grid, piece))
            self._draw_piece(screen, ghost, grid, outline=True)
            self._draw_piece(screen, piece, grid)

        x0 = self.margin * 2 + grid.shape[1] * self.cell_size
        y0 = self.margin
        y0 = self._draw_preview(screen, state.next_piece, "Next", x0, y0)
        y0 = self._draw_preview(screen, state.next_next_piece, "After", x0, y0)
        y0 = self._draw_preview(screen, state.hold_piece, "Hold", x0, y0)

        info_lines = [
            f"Score: {state.score}",
            f"Level: {state.level}",
            f"Lines: {state.lines_cleared_total}",
        ]
        for i, txt in enumerate(info_lines):
            screen.blit(self.font.render(txt, True, TEXT), (x0, y0 + i * 22))

        banner = None
        if state.game_over:
            banner = "Game Over - Press R to restart"
        elif state.paused:
            banner = "Paused - Press P to resume"
        if banner is not None:
            text = self.font.render(banner, True, (255, 100, 100))
            rect = text.get_rect(center=(self.margin + grid.shape[1] * self.cell_size // 2, self.margin // 2 + 2))
            screen.blit(text, rect)

        pygame.display.flip()
