import logging
from typing import List, Optional

from esper import World

from fruitmatch.components.game_state import Phase
from fruitmatch.constants import MAX_CASCADE_STEPS
from fruitmatch.errors import CascadeLimitExceeded
from fruitmatch.events.bus import (EventBus, EVENT_TILE_SWAP_VALID, EVENT_MATCH_FOUND,
                                   EVENT_MATCH_CLEARED, EVENT_GRAVITY_APPLIED, EVENT_REFILL_COMPLETED,
                                   EVENT_CASCADE_STEP, EVENT_CASCADE_COMPLETE, EVENT_TICK)
from fruitmatch.systems.board_ops import (Match, apply_gravity_and_refill, find_matches, get_board,
                                          get_spawn_table, has_empty_cells, is_settled,
                                          resolve_matches, world_random)
from fruitmatch.systems.turn_state_utils import (get_or_create_game_state, get_or_create_turn_state,
                                                 set_phase)

logger = logging.getLogger(__name__)


class MatchResolutionSystem:
    """Drives clear -> collapse/refill rounds until the board is stable.

    A committed swap starts a cascade and clears its matches straight away. In
    eager mode the rest of the cascade runs inside the same call; otherwise each
    tick advances it by one step (a collapse/refill or a clear), which lets a
    host animate the falling tiles between frames. Ticks on an idle board also
    pick up runs or empty cells left by a loaded grid.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        eager: bool = True,
        max_steps: int = MAX_CASCADE_STEPS,
    ):
        self.world = world
        self.event_bus = event_bus
        self.eager = eager
        self.max_steps = max_steps
        self.event_bus.subscribe(EVENT_TILE_SWAP_VALID, self.on_swap_valid)
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    def on_swap_valid(self, sender, **kwargs):
        matches = kwargs.get('matches') or find_matches(get_board(self.world).cells)
        self._begin_cascade(source='swap')
        self._clear(matches)
        if self.eager:
            self.settle()

    def on_tick(self, sender, **kwargs):
        self.advance()

    def advance(self) -> bool:
        """Perform one resolution step; return True if the grid changed."""
        state = get_or_create_game_state(self.world)
        grid = get_board(self.world).cells
        if state.phase is Phase.IDLE:
            if is_settled(grid):
                return False
            self._begin_cascade(source='poll')
        changed = self._step()
        if is_settled(grid):
            self._complete_cascade()
        return changed

    def settle(self) -> int:
        """Advance until the cascade completes; return the number of steps taken."""
        steps = 0
        while get_or_create_game_state(self.world).phase is Phase.SETTLING or not is_settled(get_board(self.world).cells):
            if steps >= self.max_steps:
                raise CascadeLimitExceeded(f"Board still unsettled after {steps} steps")
            self.advance()
            steps += 1
        return steps

    def _step(self) -> bool:
        grid = get_board(self.world).cells
        if has_empty_cells(grid):
            moves, spawned = apply_gravity_and_refill(grid, world_random(self.world), get_spawn_table(self.world))
            self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=moves)
            if spawned:
                self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=spawned)
            return bool(moves or spawned)
        matches = find_matches(grid)
        if matches:
            self._clear(matches)
            return True
        return False

    def _clear(self, matches: List[Match]) -> None:
        turn = get_or_create_turn_state(self.world)
        turn.cascade_depth += 1
        depth = turn.cascade_depth
        matched_cells = sorted({pos for match in matches for pos in match.cells()})
        self.event_bus.emit(EVENT_CASCADE_STEP, depth=depth, positions=matched_cells, source=turn.action_source)
        self.event_bus.emit(EVENT_MATCH_FOUND, matches=list(matches), positions=matched_cells, depth=depth)
        removed = resolve_matches(get_board(self.world).cells, matches)
        turn.match_count += len(matches)
        turn.cells_cleared += len(removed)
        turn.removed |= removed
        logger.debug("Cascade depth %d cleared %d match(es), %d cell(s)", depth, len(matches), len(removed))
        self.event_bus.emit(EVENT_MATCH_CLEARED, matches=list(matches), positions=sorted(removed), depth=depth)

    def _begin_cascade(self, source: Optional[str]) -> None:
        get_or_create_turn_state(self.world).reset(action_source=source)
        set_phase(self.world, self.event_bus, Phase.SETTLING)

    def _complete_cascade(self) -> None:
        turn = get_or_create_turn_state(self.world)
        set_phase(self.world, self.event_bus, Phase.IDLE)
        self.event_bus.emit(
            EVENT_CASCADE_COMPLETE,
            depth=turn.cascade_depth,
            match_count=turn.match_count,
            cells_cleared=turn.cells_cleared,
        )
