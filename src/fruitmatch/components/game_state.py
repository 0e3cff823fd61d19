"""Session-wide resource describing the turn phase and the running score."""
from dataclasses import dataclass
from enum import Enum, auto


class Phase(Enum):
    """IDLE accepts swaps; SETTLING means a clear/collapse cycle is still running."""
    IDLE = auto()
    SETTLING = auto()


@dataclass(slots=True)
class GameState:
    """Singleton component storing the phase and score of the current game."""
    phase: Phase = Phase.IDLE
    score: int = 0
    moves: int = 0
