import logging
from typing import Optional

from esper import World

from fruitmatch.components.board import Board
from fruitmatch.components.game_state import Phase
from fruitmatch.components.tile_types import SpawnTable
from fruitmatch.constants import GRID_COLS, GRID_ROWS, MAX_GENERATION_ATTEMPTS
from fruitmatch.events.bus import (EventBus, EVENT_BOARD_GENERATED, EVENT_BOARD_LOADED,
                                   EVENT_NEW_GAME_REQUEST)
from fruitmatch.systems.board_ops import Grid, copy_grid, generate_grid, validate_grid, world_random
from fruitmatch.systems.turn_state_utils import (get_or_create_game_state, get_or_create_turn_state,
                                                 set_phase)

logger = logging.getLogger(__name__)


class BoardSystem:
    """Owns the board entity: creates it, fills it with a fresh board and replaces it on restart."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        rows: int = GRID_ROWS,
        cols: int = GRID_COLS,
        *,
        spawn_table: Optional[SpawnTable] = None,
        max_generation_attempts: Optional[int] = MAX_GENERATION_ATTEMPTS,
    ):
        self.world = world
        self.event_bus = event_bus
        self.max_generation_attempts = max_generation_attempts
        # Create a single board entity carrying the grid and its spawn distribution
        self.board_entity = self.world.create_entity(
            Board(rows=rows, cols=cols),
            spawn_table or SpawnTable(),
        )
        self.event_bus.subscribe(EVENT_NEW_GAME_REQUEST, self.on_new_game_request)
        self.new_board(reason='init')

    @property
    def board(self) -> Board:
        return self.world.component_for_entity(self.board_entity, Board)

    @property
    def spawn_table(self) -> SpawnTable:
        return self.world.component_for_entity(self.board_entity, SpawnTable)

    def on_new_game_request(self, sender, **kwargs):
        self.new_board(reason='new_game')

    def new_board(self, reason: str = 'new_game') -> Grid:
        """Replace the grid wholesale with a fresh match-free board and reset turn bookkeeping."""
        board = self.board
        grid, attempts = generate_grid(
            board.rows,
            board.cols,
            world_random(self.world),
            self.spawn_table,
            max_attempts=self.max_generation_attempts,
        )
        board.cells = grid
        get_or_create_game_state(self.world).moves = 0
        self._reset_turn()
        logger.debug("New board (%s) after %d attempt(s)", reason, attempts)
        self.event_bus.emit(EVENT_BOARD_GENERATED, reason=reason, rows=board.rows, cols=board.cols,
                            attempts=attempts)
        return copy_grid(grid)

    def load_grid(self, grid: Grid) -> None:
        """Install a caller-supplied grid as-is; matches or empty cells are left for the resolver."""
        board = self.board
        validate_grid(grid, board.rows, board.cols)
        board.cells = copy_grid(grid)
        self._reset_turn()
        self.event_bus.emit(EVENT_BOARD_LOADED, rows=board.rows, cols=board.cols)

    def _reset_turn(self) -> None:
        get_or_create_turn_state(self.world).reset()
        set_phase(self.world, self.event_bus, Phase.IDLE)
