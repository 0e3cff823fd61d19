from __future__ import annotations

from collections import deque
import random
from typing import Iterable, Sequence

from fruitmatch.components.tile_types import Token
from fruitmatch.events.bus import EventBus
from fruitmatch.systems.board import BoardSystem
from fruitmatch.systems.board_ops import Grid, parse_grid
from fruitmatch.systems.match import MatchSystem
from fruitmatch.systems.match_resolution import MatchResolutionSystem
from fruitmatch.systems.score_system import ScoreSystem
from fruitmatch.world import create_world


class ScriptedRandom:
    """Random source that makes SpawnTable.draw return a fixed token sequence.

    random() steers the fruit/vegetable coin flip towards the next scripted
    token and choice() hands it out. Running past the end of the script fails
    loudly so tests state exactly how many tiles they expect to be drawn.
    """

    def __init__(self, tokens: Iterable[Token] | str = ()):
        if isinstance(tokens, str):
            tokens = [Token.from_glyph(glyph) for glyph in tokens if not glyph.isspace()]
        self._tokens = deque(tokens)
        self.drawn = 0

    @property
    def remaining(self) -> int:
        return len(self._tokens)

    def extend(self, tokens: Iterable[Token] | str) -> None:
        if isinstance(tokens, str):
            tokens = [Token.from_glyph(glyph) for glyph in tokens if not glyph.isspace()]
        self._tokens.extend(tokens)

    def random(self) -> float:
        if not self._tokens:
            raise AssertionError(f"Scripted random exhausted after {self.drawn} tokens")
        return 0.0 if self._tokens[0].is_fruit else 0.99

    def choice(self, seq: Sequence[Token]) -> Token:
        token = self._tokens.popleft()
        assert token in seq, f"Scripted token {token!r} not offered in {seq!r}"
        self.drawn += 1
        return token


def grid_of(*rows: str) -> Grid:
    return parse_grid(rows)


def grid_rows(grid: Grid) -> list[str]:
    return ["".join(token.glyph for token in row) for row in grid]


def build_systems(grid: Grid | None = None, *, rng=None, eager: bool = True, rows: int = 8, cols: int = 8):
    """Wire bus, world and the board systems; optionally install a prepared grid.

    The initial board is generated from a seeded source; rng, if given, takes
    over afterwards and feeds every later refill.
    """
    bus = EventBus()
    world = create_world(rng=random.Random(0))
    ScoreSystem(world, bus)
    match = MatchSystem(world, bus)
    resolution = MatchResolutionSystem(world, bus, eager=eager)
    if grid is not None:
        rows, cols = len(grid), len(grid[0])
    board = BoardSystem(world, bus, rows, cols)
    if grid is not None:
        board.load_grid(grid)
    if rng is not None:
        setattr(world, "random", rng)
    return bus, world, board, match, resolution
