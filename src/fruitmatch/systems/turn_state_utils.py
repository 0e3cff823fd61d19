import logging

from esper import World

from fruitmatch.components.game_state import GameState, Phase
from fruitmatch.components.turn_state import TurnState
from fruitmatch.events.bus import EventBus, EVENT_PHASE_CHANGED

logger = logging.getLogger(__name__)


def get_or_create_turn_state(world: World) -> TurnState:
    """Return the shared TurnState component, creating it if absent."""
    existing = list(world.get_component(TurnState))
    if existing:
        return existing[0][1]
    world.create_entity(TurnState())
    return list(world.get_component(TurnState))[0][1]


def get_or_create_game_state(world: World) -> GameState:
    """Return the shared GameState component, creating it if absent."""
    existing = list(world.get_component(GameState))
    if existing:
        return existing[0][1]
    world.create_entity(GameState())
    return list(world.get_component(GameState))[0][1]


def set_phase(world: World, event_bus: EventBus, phase: Phase) -> None:
    state = get_or_create_game_state(world)
    previous = state.phase
    if previous is phase:
        return
    state.phase = phase
    logger.debug("Phase %s -> %s", previous.name, phase.name)
    event_bus.emit(EVENT_PHASE_CHANGED, previous=previous, phase=phase)
