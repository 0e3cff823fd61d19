import random

from esper import World

from fruitmatch.components.game_state import GameState, Phase
from fruitmatch.components.turn_state import TurnState


def create_world(*, rng: random.Random | None = None, initial_phase: Phase = Phase.IDLE) -> World:
    """Create the world with its shared random source and the singleton state entity.

    The board entity is added by BoardSystem, which owns its dimensions.
    """
    world = World()
    setattr(world, "random", rng or random.Random())
    world.create_entity(GameState(phase=initial_phase), TurnState())
    return world
