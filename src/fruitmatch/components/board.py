from dataclasses import dataclass, field
from typing import List

from fruitmatch.components.tile_types import Token
from fruitmatch.errors import BoardShapeError


@dataclass(slots=True)
class Board:
    """Single board component holding the token grid (row 0 at the top)."""
    rows: int
    cols: int
    cells: List[List[Token]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise BoardShapeError(f"Board needs positive dimensions, got {self.rows}x{self.cols}")
        if not self.cells:
            self.cells = [[Token.EMPTY] * self.cols for _ in range(self.rows)]
        elif len(self.cells) != self.rows or any(len(row) != self.cols for row in self.cells):
            raise BoardShapeError(f"Cells do not form a {self.rows}x{self.cols} grid")
