from dataclasses import dataclass, field
from enum import IntEnum
from typing import Tuple
import random

from fruitmatch.constants import FRUIT_CHANCE


class Token(IntEnum):
    """Value held by one board cell.

    Fruit tokens match in runs; vegetable tokens never match and are only
    destroyed when they sit next to a cleared fruit run. EMPTY marks a cell
    between clearing and the next collapse/refill.
    """
    EMPTY = 0
    FRUIT_1 = 1
    FRUIT_2 = 2
    FRUIT_3 = 3
    VEGETABLE_1 = 4
    VEGETABLE_2 = 5
    VEGETABLE_3 = 6

    @property
    def is_empty(self) -> bool:
        return self is Token.EMPTY

    @property
    def is_fruit(self) -> bool:
        return Token.FRUIT_1 <= self <= Token.FRUIT_3

    @property
    def is_vegetable(self) -> bool:
        return Token.VEGETABLE_1 <= self <= Token.VEGETABLE_3

    @property
    def kind(self) -> int:
        """Index within the token's category (1-3), 0 for EMPTY."""
        if self.is_vegetable:
            return self - Token.FRUIT_3
        return int(self)

    @property
    def glyph(self) -> str:
        return _GLYPHS[self]

    @classmethod
    def from_glyph(cls, glyph: str) -> "Token":
        try:
            return _TOKENS_BY_GLYPH[glyph]
        except KeyError:
            raise ValueError(f"Unknown tile glyph {glyph!r}") from None


FRUITS: Tuple[Token, ...] = (Token.FRUIT_1, Token.FRUIT_2, Token.FRUIT_3)
VEGETABLES: Tuple[Token, ...] = (Token.VEGETABLE_1, Token.VEGETABLE_2, Token.VEGETABLE_3)

_GLYPHS = {
    Token.EMPTY: '.',
    Token.FRUIT_1: 'A',
    Token.FRUIT_2: 'B',
    Token.FRUIT_3: 'C',
    Token.VEGETABLE_1: 'x',
    Token.VEGETABLE_2: 'y',
    Token.VEGETABLE_3: 'z',
}
_TOKENS_BY_GLYPH = {glyph: token for token, glyph in _GLYPHS.items()}


@dataclass(slots=True)
class SpawnTable:
    """Distribution used for both fresh boards and refills.

    Lives on the board entity. A draw is one fruit/vegetable coin flip
    followed by a uniform pick inside the chosen category.
    """
    fruit_chance: float = FRUIT_CHANCE
    fruits: Tuple[Token, ...] = field(default=FRUITS)
    vegetables: Tuple[Token, ...] = field(default=VEGETABLES)

    def __post_init__(self) -> None:
        if not 0.0 <= self.fruit_chance <= 1.0:
            raise ValueError(f"fruit_chance must be within [0, 1], got {self.fruit_chance}")
        self.fruits = tuple(self.fruits)
        self.vegetables = tuple(self.vegetables)
        if any(not token.is_fruit for token in self.fruits):
            raise ValueError("fruits may only contain fruit tokens")
        if any(not token.is_vegetable for token in self.vegetables):
            raise ValueError("vegetables may only contain vegetable tokens")
        if self.fruit_chance > 0.0 and not self.fruits:
            raise ValueError("fruit_chance is positive but no fruit tokens are spawnable")
        if self.fruit_chance < 1.0 and not self.vegetables:
            raise ValueError("fruit_chance is below 1 but no vegetable tokens are spawnable")

    def draw(self, rng: random.Random) -> Token:
        if rng.random() < self.fruit_chance:
            return rng.choice(self.fruits)
        return rng.choice(self.vegetables)
