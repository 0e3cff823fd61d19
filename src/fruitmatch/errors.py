"""Failure types raised by the board engine.

Swap validation problems are not exceptions: they are reported back as a
``RejectReason`` on the swap result. The classes below signal a broken
board or a runaway loop and are expected to propagate.
"""
from enum import Enum


class RejectReason(Enum):
    """Why a proposed swap was turned down."""
    OUT_OF_BOUNDS = "out_of_bounds"
    NOT_ADJACENT = "not_adjacent"
    SETTLING = "settling"
    NO_MATCH = "no_match"


class InvariantViolation(RuntimeError):
    """The board reached a state a correct engine can never produce."""


class BoardShapeError(InvariantViolation):
    """Grid dimensions are invalid or disagree with the board component."""


class GenerationExhausted(InvariantViolation):
    """No match-free board was produced within the attempt cap."""


class CascadeLimitExceeded(InvariantViolation):
    """An eager settle kept finding work past its step cap."""
