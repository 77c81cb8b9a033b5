"""Game module for Polyfall.

Exports the core game engine and supporting classes:
- GameConfig: Static field, piece, gravity and palette parameters
- Piece: Polyomino with rotation inside its bounding frame
- ShapeGenerator: Random connected, hole-free polyomino synthesis
- ScoringRules: Placement/line-clear scoring and level progression
- GameEngine: Pure transitions over GameState snapshots
"""

from .config import GameConfig
from .grid import can_place, clear_lines, empty_grid, ghost_offset, lock
from .pieces import Piece
from .rules import ScoringRules
from .shapes import ShapeGenerator
from .core import Action, GameEngine, GameState, Outcome

__all__ = [
    "GameConfig",
    "Piece",
    "ShapeGenerator",
    "ScoringRules",
    "GameEngine",
    "GameState",
    "Outcome",
    "Action",
    "empty_grid",
    "can_place",
    "lock",
    "clear_lines",
    "ghost_offset",
]
