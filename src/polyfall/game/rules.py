from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int, int] = (0, 100, 400, 900, 1600)
    per_line_overflow: int = 1000
    placement_score: int = 10
    lines_per_level: int = 3

    def line_clear_bonus(self, lines: int, level: int) -> int:
        if lines <= 0:
            return 0
        if lines < len(self.line_clear_scores):
            base = self.line_clear_scores[lines]
        else:
            # Tall pieces can clear more rows than the table covers
            base = lines * self.per_line_overflow
        return base * level

    def score_delta(self, lines: int, level: int) -> int:
        """Points for one lock: placement bonus plus the level-scaled clear bonus."""
        return self.placement_score + self.line_clear_bonus(lines, level)

    def next_level(self, level: int, lines: int) -> int:
        return level + max(0, lines) // self.lines_per_level
