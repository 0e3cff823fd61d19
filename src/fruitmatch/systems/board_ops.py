from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Set, Tuple

from esper import World

from fruitmatch.components.board import Board
from fruitmatch.components.tile_types import SpawnTable, Token
from fruitmatch.constants import MATCH_MIN, MAX_GENERATION_ATTEMPTS
from fruitmatch.errors import BoardShapeError, GenerationExhausted

logger = logging.getLogger(__name__)

Position = Tuple[int, int]
Grid = List[List[Token]]

NEIGHBOURS: Tuple[Position, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


class Orientation(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True, slots=True)
class Match:
    """A maximal run of identical fruit; (row, col) is its top/left cell."""
    orientation: Orientation
    row: int
    col: int
    length: int
    token: Token

    def cells(self) -> List[Position]:
        if self.orientation is Orientation.HORIZONTAL:
            return [(self.row, self.col + i) for i in range(self.length)]
        return [(self.row + i, self.col) for i in range(self.length)]


@dataclass(slots=True)
class GravityMove:
    source: Position
    target: Position
    token: Token


# ---------------------------------------------------------------------------
# Grid helpers
# ---------------------------------------------------------------------------

def grid_dimensions(grid: Grid) -> Tuple[int, int]:
    rows = len(grid)
    return rows, (len(grid[0]) if rows else 0)


def validate_grid(grid: Grid, rows: int | None = None, cols: int | None = None) -> None:
    """Raise BoardShapeError unless grid is a non-empty rectangle of Tokens of the given size."""
    if not grid or not grid[0]:
        raise BoardShapeError("Grid must have at least one row and one column")
    width = len(grid[0])
    if any(len(row) != width for row in grid):
        raise BoardShapeError("Grid rows have differing lengths")
    if rows is not None and len(grid) != rows:
        raise BoardShapeError(f"Grid has {len(grid)} rows, board expects {rows}")
    if cols is not None and width != cols:
        raise BoardShapeError(f"Grid has {width} columns, board expects {cols}")
    for row in grid:
        for token in row:
            if not isinstance(token, Token):
                raise BoardShapeError(f"Grid cell holds {token!r}, not a Token")


def copy_grid(grid: Grid) -> Grid:
    return [list(row) for row in grid]


def in_bounds(grid: Grid, pos: Position) -> bool:
    """False for anything that is not a (row, col) pair of ints inside the grid."""
    try:
        row, col = pos
    except (TypeError, ValueError):
        return False
    if not (isinstance(row, int) and isinstance(col, int)):
        return False
    rows, cols = grid_dimensions(grid)
    return 0 <= row < rows and 0 <= col < cols


def is_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)


def swap_cells(grid: Grid, a: Position, b: Position) -> None:
    (ar, ac), (br, bc) = a, b
    grid[ar][ac], grid[br][bc] = grid[br][bc], grid[ar][ac]


def has_empty_cells(grid: Grid) -> bool:
    return any(token is Token.EMPTY for row in grid for token in row)


def is_settled(grid: Grid) -> bool:
    """A settled grid has no empty cells and no fruit runs."""
    return not has_empty_cells(grid) and not find_matches(grid)


def format_grid(grid: Grid) -> str:
    return "\n".join("".join(token.glyph for token in row) for row in grid)


def parse_grid(text: str | Iterable[str]) -> Grid:
    """Build a grid from glyph rows ('.', 'A'-'C' fruit, 'x'-'z' vegetables)."""
    lines = text.split() if isinstance(text, str) else list(text)
    try:
        grid = [[Token.from_glyph(glyph) for glyph in line.strip()] for line in lines if line.strip()]
    except ValueError as exc:
        raise BoardShapeError(str(exc)) from exc
    validate_grid(grid)
    return grid


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

def random_grid(rows: int, cols: int, rng: random.Random, spawn: SpawnTable) -> Grid:
    """Independently draw every cell, row by row, left to right."""
    return [[spawn.draw(rng) for _ in range(cols)] for _ in range(rows)]


def generate_grid(
    rows: int,
    cols: int,
    rng: random.Random,
    spawn: SpawnTable | None = None,
    *,
    max_attempts: int | None = MAX_GENERATION_ATTEMPTS,
) -> Tuple[Grid, int]:
    """Draw whole boards until one has no fruit run; return (grid, attempts used).

    A board containing a match is discarded entirely rather than patched.
    """
    if rows <= 0 or cols <= 0:
        raise BoardShapeError(f"Board needs positive dimensions, got {rows}x{cols}")
    spawn = spawn or SpawnTable()
    attempts = 0
    while max_attempts is None or attempts < max_attempts:
        attempts += 1
        grid = random_grid(rows, cols, rng, spawn)
        if not find_matches(grid):
            logger.debug("Generated %dx%d board after %d attempt(s)", rows, cols, attempts)
            return grid, attempts
    raise GenerationExhausted(f"No match-free {rows}x{cols} board after {attempts} attempts")


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------

def find_matches(grid: Grid, *, min_length: int = MATCH_MIN) -> List[Match]:
    """Return horizontal runs in row-major order, then vertical runs in column-major order.

    Scanning is greedy: once a run is found it is extended as far as it goes and
    the scan resumes after its last cell, so runs within one pass never overlap.
    A cell can still appear in one horizontal and one vertical match.
    """
    rows, cols = grid_dimensions(grid)
    matches: List[Match] = []
    for r in range(rows):
        c = 0
        while c <= cols - min_length:
            token = grid[r][c]
            if token.is_fruit and all(grid[r][c + i] == token for i in range(1, min_length)):
                length = min_length
                while c + length < cols and grid[r][c + length] == token:
                    length += 1
                matches.append(Match(Orientation.HORIZONTAL, r, c, length, token))
                c += length
            else:
                c += 1
    for c in range(cols):
        r = 0
        while r <= rows - min_length:
            token = grid[r][c]
            if token.is_fruit and all(grid[r + i][c] == token for i in range(1, min_length)):
                length = min_length
                while r + length < rows and grid[r + length][c] == token:
                    length += 1
                matches.append(Match(Orientation.VERTICAL, r, c, length, token))
                r += length
            else:
                r += 1
    return matches


def resolve_matches(grid: Grid, matches: Iterable[Match]) -> Set[Position]:
    """Clear every matched cell plus each vegetable orthogonally next to one.

    The removal set is computed from the grid as it stands before anything is
    cleared; destroyed vegetables do not destroy their own neighbours.
    """
    removal: Set[Position] = set()
    for match in matches:
        for row, col in match.cells():
            removal.add((row, col))
            for dr, dc in NEIGHBOURS:
                neighbour = (row + dr, col + dc)
                if in_bounds(grid, neighbour) and grid[neighbour[0]][neighbour[1]].is_vegetable:
                    removal.add(neighbour)
    for row, col in removal:
        grid[row][col] = Token.EMPTY
    return removal


def _has_line_match(grid: Grid, pos: Position, min_length: int = MATCH_MIN) -> bool:
    """Return True if a horizontal or vertical fruit run through pos is long enough."""
    row, col = pos
    token = grid[row][col]
    if not token.is_fruit:
        return False
    rows, cols = grid_dimensions(grid)
    # Horizontal sweep
    left = col
    while left - 1 >= 0 and grid[row][left - 1] == token:
        left -= 1
    right = col
    while right + 1 < cols and grid[row][right + 1] == token:
        right += 1
    if right - left + 1 >= min_length:
        return True
    # Vertical sweep
    top = row
    while top - 1 >= 0 and grid[top - 1][col] == token:
        top -= 1
    bottom = row
    while bottom + 1 < rows and grid[bottom + 1][col] == token:
        bottom += 1
    return bottom - top + 1 >= min_length


def predict_swap_creates_match(grid: Grid, a: Position, b: Position) -> bool:
    """Return True if exchanging a and b would form a run through either cell."""
    trial = copy_grid(grid)
    swap_cells(trial, a, b)
    return _has_line_match(trial, a) or _has_line_match(trial, b)


def find_valid_swaps(grid: Grid) -> List[Tuple[Position, Position]]:
    """Enumerate adjacent swaps (right and down neighbours) that would produce a match."""
    rows, cols = grid_dimensions(grid)
    swaps: List[Tuple[Position, Position]] = []
    for row in range(rows):
        for col in range(cols):
            pos = (row, col)
            if col + 1 < cols and predict_swap_creates_match(grid, pos, (row, col + 1)):
                swaps.append((pos, (row, col + 1)))
            if row + 1 < rows and predict_swap_creates_match(grid, pos, (row + 1, col)):
                swaps.append((pos, (row + 1, col)))
    return swaps


# ---------------------------------------------------------------------------
# Gravity and refill
# ---------------------------------------------------------------------------

def collapse_columns(grid: Grid) -> List[GravityMove]:
    """Let tokens fall into empty cells below them, column by column.

    Each empty cell, visited from the bottom row upward, pulls down the nearest
    non-empty token above it. Every cell below the one being visited is already
    filled, so one pass compacts the column while keeping token order.
    """
    rows, cols = grid_dimensions(grid)
    moves: List[GravityMove] = []
    for col in range(cols):
        for row in range(rows - 1, 0, -1):
            if grid[row][col] is not Token.EMPTY:
                continue
            for above in range(row - 1, -1, -1):
                token = grid[above][col]
                if token is not Token.EMPTY:
                    grid[row][col] = token
                    grid[above][col] = Token.EMPTY
                    moves.append(GravityMove(source=(above, col), target=(row, col), token=token))
                    break
    return moves


def refill_empty_cells(grid: Grid, rng: random.Random, spawn: SpawnTable) -> List[Position]:
    """Spawn a token in every empty cell, column by column from the top.

    New tokens are not checked against existing runs; any match they form is
    picked up by the next scan.
    """
    rows, cols = grid_dimensions(grid)
    spawned: List[Position] = []
    for col in range(cols):
        for row in range(rows):
            if grid[row][col] is Token.EMPTY:
                grid[row][col] = spawn.draw(rng)
                spawned.append((row, col))
    return spawned


def apply_gravity_and_refill(
    grid: Grid, rng: random.Random, spawn: SpawnTable
) -> Tuple[List[GravityMove], List[Position]]:
    moves = collapse_columns(grid)
    spawned = refill_empty_cells(grid, rng, spawn)
    return moves, spawned


def collapse_and_refill(grid: Grid, rng: random.Random, spawn: SpawnTable | None = None) -> bool:
    """Collapse and refill the grid; return True if any cell fell or was spawned."""
    moves, spawned = apply_gravity_and_refill(grid, rng, spawn or SpawnTable())
    return bool(moves or spawned)


# ---------------------------------------------------------------------------
# World access
# ---------------------------------------------------------------------------

def get_board_entity(world: World) -> int:
    for entity, _ in world.get_component(Board):
        return entity
    raise BoardShapeError("Board component not found")


def get_board(world: World) -> Board:
    return world.component_for_entity(get_board_entity(world), Board)


def get_spawn_table(world: World) -> SpawnTable:
    entity = get_board_entity(world)
    if world.has_component(entity, SpawnTable):
        return world.component_for_entity(entity, SpawnTable)
    table = SpawnTable()
    world.add_component(entity, table)
    return table


def world_random(world: World) -> random.Random:
    rng = getattr(world, "random", None)
    if rng is None:
        rng = random.Random()
        setattr(world, "random", rng)
    return rng
