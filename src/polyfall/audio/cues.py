from __future__ import annotations

from enum import Enum
from typing import List, Optional

from polyfall.game import Action, GameState, Outcome


class Cue(str, Enum):
    MOVE = "move"
    DROP = "drop"
    LOCK = "lock"
    CLEAR_1 = "clear_1"
    CLEAR_2 = "clear_2"
    CLEAR_3 = "clear_3"
    CLEAR_4 = "clear_4"
    LEVEL_UP = "level_up"
    GAME_OVER = "game_over"
    ERROR = "error"


_CLEAR_CUES = (Cue.CLEAR_1, Cue.CLEAR_2, Cue.CLEAR_3, Cue.CLEAR_4)
_MOVE_ACTIONS = (Action.LEFT, Action.RIGHT, Action.ROTATE_CW, Action.ROTATE_CCW, Action.SOFT_DROP)


def select_cues(previous: GameState, outcome: Outcome, action: Optional[Action] = None) -> List[Cue]:
    """Pick sound cues by comparing the snapshot before and after a transition.

    `action` is None for gravity ticks, which only produce lock, clear,
    level and game-over cues.
    """
    cues: List[Cue] = []
    current = outcome.state

    if action == Action.HARD_DROP:
        cues.append(Cue.DROP)
    elif action in _MOVE_ACTIONS and outcome.applied:
        cues.append(Cue.MOVE)
    elif action == Action.HOLD:
        cues.append(Cue.MOVE if outcome.applied else Cue.ERROR)

    if outcome.locked:
        if outcome.lines_cleared > 0:
            cues.append(_CLEAR_CUES[min(outcome.lines_cleared, len(_CLEAR_CUES)) - 1])
        cues.append(Cue.LOCK)

    if action != Action.RESET:
        if current.level > previous.level:
            cues.append(Cue.LEVEL_UP)
        if current.game_over and not previous.game_over:
            cues.append(Cue.GAME_OVER)
    return cues
