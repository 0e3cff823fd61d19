"""Game session facade.

Sets up the world, the event bus and the board systems, and exposes the
operations a presentation layer needs: start a game, propose a swap, poll
the cascade forward, and read the grid.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Tuple

from fruitmatch.components.game_state import Phase
from fruitmatch.components.tile_types import SpawnTable
from fruitmatch.constants import (GRID_COLS, GRID_ROWS, MAX_CASCADE_STEPS, MAX_GENERATION_ATTEMPTS,
                                  POINTS_PER_MATCH)
from fruitmatch.errors import RejectReason
from fruitmatch.events.bus import EventBus
from fruitmatch.systems.board import BoardSystem
from fruitmatch.systems.board_ops import Grid, Position, copy_grid, find_valid_swaps, get_board, is_settled
from fruitmatch.systems.match import MatchSystem
from fruitmatch.systems.match_resolution import MatchResolutionSystem
from fruitmatch.systems.score_system import ScoreSystem
from fruitmatch.systems.turn_state_utils import get_or_create_game_state, get_or_create_turn_state
from fruitmatch.world import create_world


@dataclass(frozen=True, slots=True)
class SwapResult:
    accepted: bool
    match_count: int = 0
    removed_cells: FrozenSet[Position] = field(default_factory=frozenset)
    points: int = 0
    cascade_depth: int = 0
    reason: Optional[RejectReason] = None


@dataclass(frozen=True, slots=True)
class TickResult:
    changed: bool
    settled: bool


class GameSession:
    def __init__(
        self,
        *,
        rows: int = GRID_ROWS,
        cols: int = GRID_COLS,
        rng: random.Random | None = None,
        seed: int | None = None,
        eager: bool = True,
        spawn_table: SpawnTable | None = None,
        points_per_match: int = POINTS_PER_MATCH,
        max_generation_attempts: int | None = MAX_GENERATION_ATTEMPTS,
        max_cascade_steps: int = MAX_CASCADE_STEPS,
        event_bus: EventBus | None = None,
    ):
        self.event_bus = event_bus or EventBus()
        self.world = create_world(rng=rng or random.Random(seed))
        # Score must be listening before the first board is generated.
        self.score_system = ScoreSystem(self.world, self.event_bus, points_per_match=points_per_match)
        self.match_system = MatchSystem(self.world, self.event_bus)
        self.resolution_system = MatchResolutionSystem(
            self.world, self.event_bus, eager=eager, max_steps=max_cascade_steps
        )
        self.board_system = BoardSystem(
            self.world,
            self.event_bus,
            rows,
            cols,
            spawn_table=spawn_table,
            max_generation_attempts=max_generation_attempts,
        )

    # -- state ---------------------------------------------------------------

    @property
    def score(self) -> int:
        return get_or_create_game_state(self.world).score

    @property
    def moves(self) -> int:
        return get_or_create_game_state(self.world).moves

    @property
    def phase(self) -> Phase:
        return get_or_create_game_state(self.world).phase

    @property
    def settled(self) -> bool:
        return self.phase is Phase.IDLE and is_settled(get_board(self.world).cells)

    def snapshot(self) -> Grid:
        """Copy of the current grid; changing it does not touch the board."""
        return copy_grid(get_board(self.world).cells)

    # -- operations ----------------------------------------------------------

    def new_game(self) -> Grid:
        return self.board_system.new_board(reason='new_game')

    def load(self, grid: Grid) -> None:
        self.board_system.load_grid(grid)

    def propose_swap(self, a: Position, b: Position) -> SwapResult:
        score_before = self.score
        outcome = self.match_system.request_swap(a, b)
        if not outcome.accepted:
            return SwapResult(accepted=False, reason=outcome.reason)
        turn = get_or_create_turn_state(self.world)
        return SwapResult(
            accepted=True,
            match_count=turn.match_count,
            removed_cells=frozenset(turn.removed),
            points=self.score - score_before,
            cascade_depth=turn.cascade_depth,
        )

    def tick(self) -> TickResult:
        changed = self.resolution_system.advance()
        return TickResult(changed=changed, settled=self.settled)

    def valid_swaps(self) -> List[Tuple[Position, Position]]:
        return find_valid_swaps(get_board(self.world).cells)
