from dataclasses import dataclass, field
from typing import Optional, Set, Tuple


@dataclass(slots=True)
class TurnState:
    """Accumulates what the current turn's cascade has done so far."""

    action_source: Optional[str] = None
    cascade_depth: int = 0
    match_count: int = 0
    cells_cleared: int = 0
    removed: Set[Tuple[int, int]] = field(default_factory=set)

    def reset(self, action_source: Optional[str] = None) -> None:
        self.action_source = action_source
        self.cascade_depth = 0
        self.match_count = 0
        self.cells_cleared = 0
        self.removed = set()
