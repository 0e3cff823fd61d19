import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from esper import World

from fruitmatch.components.game_state import Phase
from fruitmatch.errors import RejectReason
from fruitmatch.events.bus import (EventBus, EVENT_TILE_SWAP_REQUEST, EVENT_TILE_SWAP_VALID,
                                   EVENT_TILE_SWAP_INVALID)
from fruitmatch.systems.board_ops import Match, find_matches, get_board, in_bounds, is_adjacent, swap_cells
from fruitmatch.systems.turn_state_utils import get_or_create_game_state

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SwapOutcome:
    accepted: bool
    reason: Optional[RejectReason] = None
    matches: List[Match] = field(default_factory=list)


class MatchSystem:
    """Validates swap requests: tentative exchange, scan, then commit or revert.

    A committed swap is announced with EVENT_TILE_SWAP_VALID carrying the matches
    it produced; anything else leaves the grid untouched and emits
    EVENT_TILE_SWAP_INVALID with the reason.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        event_bus.subscribe(EVENT_TILE_SWAP_REQUEST, self.on_swap_request)

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        self.request_swap(src, dst)

    def request_swap(self, src: Tuple[int, int], dst: Tuple[int, int]) -> SwapOutcome:
        state = get_or_create_game_state(self.world)
        if state.phase is Phase.SETTLING:
            return self._reject(src, dst, RejectReason.SETTLING)
        grid = get_board(self.world).cells
        if not (in_bounds(grid, src) and in_bounds(grid, dst)):
            return self._reject(src, dst, RejectReason.OUT_OF_BOUNDS)
        if not is_adjacent(src, dst):
            return self._reject(src, dst, RejectReason.NOT_ADJACENT)
        swap_cells(grid, src, dst)
        matches = find_matches(grid)
        if not matches:
            # Swap back so the grid is exactly as it was
            swap_cells(grid, src, dst)
            return self._reject(src, dst, RejectReason.NO_MATCH)
        state.moves += 1
        logger.debug("Swap %s<->%s accepted with %d match(es)", src, dst, len(matches))
        self.event_bus.emit(EVENT_TILE_SWAP_VALID, src=src, dst=dst, matches=matches)
        return SwapOutcome(accepted=True, matches=matches)

    def _reject(self, src, dst, reason: RejectReason) -> SwapOutcome:
        logger.debug("Swap %s<->%s rejected: %s", src, dst, reason.value)
        self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason=reason)
        return SwapOutcome(accepted=False, reason=reason)
