from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

Color = Tuple[int, int, int]

DEFAULT_COLORS: Tuple[Color, ...] = (
    (255, 20, 147),   # deep pink
    (0, 206, 209),    # dark turquoise
    (127, 255, 0),    # chartreuse
    (255, 215, 0),    # gold
    (147, 112, 219),  # medium purple
    (255, 99, 71),    # tomato
    (255, 105, 180),  # hot pink
    (0, 250, 154),    # medium spring green
    (255, 165, 0),    # orange
    (138, 43, 226),   # blue violet
    (0, 255, 255),    # aqua
    (255, 69, 0),     # orange red
)


@dataclass(frozen=True)
class GameConfig:
    """Static game parameters, read once at startup."""

    width: int = 20
    height: int = 40
    min_piece_size: int = 4
    max_piece_size: int = 8
    # Gravity curve: interval = initial * rate ** (level - 1), floored
    initial_fall_speed_ms: int = 1000
    speed_increase_rate: float = 0.9
    min_fall_speed_ms: int = 100
    colors: Tuple[Color, ...] = DEFAULT_COLORS
    sound_volume: float = 0.3
    max_generation_attempts: int = 10_000
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"field must be non-empty, got {self.width}x{self.height}")
        if not 1 <= self.min_piece_size <= self.max_piece_size:
            raise ValueError(
                f"invalid piece size bounds [{self.min_piece_size}, {self.max_piece_size}]"
            )
        if self.max_piece_size > self.width:
            raise ValueError("pieces cannot be wider than the field")
        if not self.colors:
            raise ValueError("color palette must not be empty")
        if len(self.colors) > 127:
            raise ValueError("at most 127 colors fit in the int8 field encoding")
        if self.max_generation_attempts < 0:
            raise ValueError("max_generation_attempts must be >= 0")

    def fall_interval_ms(self, level: int) -> int:
        """Gravity period for `level`, never below `min_fall_speed_ms`."""
        speed = self.initial_fall_speed_ms * self.speed_increase_rate ** (level - 1)
        return int(max(speed, self.min_fall_speed_ms))

    def spawn_x(self, size: int) -> int:
        return self.width // 2 - size // 2
