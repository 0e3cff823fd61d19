from esper import World

from fruitmatch.constants import POINTS_PER_MATCH
from fruitmatch.events.bus import EventBus, EVENT_BOARD_GENERATED, EVENT_MATCH_CLEARED, EVENT_SCORE_CHANGED
from fruitmatch.systems.turn_state_utils import get_or_create_game_state


class ScoreSystem:
    """Keeps GameState.score in step with cleared matches.

    Logic:
      - On EVENT_MATCH_CLEARED: add points_per_match for every match in the round,
        whether the round came from a swap or a later cascade.
      - On EVENT_BOARD_GENERATED: a new game starts from zero.
    """
    def __init__(self, world: World, event_bus: EventBus, *, points_per_match: int = POINTS_PER_MATCH):
        self.world = world
        self.event_bus = event_bus
        self.points_per_match = points_per_match
        self.event_bus.subscribe(EVENT_MATCH_CLEARED, self.on_match_cleared)
        self.event_bus.subscribe(EVENT_BOARD_GENERATED, self.on_board_generated)

    def points_for(self, match_count: int) -> int:
        return match_count * self.points_per_match

    def on_match_cleared(self, sender, **kwargs):
        matches = kwargs.get('matches') or []
        delta = self.points_for(len(matches))
        if not delta:
            return
        state = get_or_create_game_state(self.world)
        state.score += delta
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=state.score, delta=delta)

    def on_board_generated(self, sender, **kwargs):
        state = get_or_create_game_state(self.world)
        if state.score == 0:
            return
        delta = -state.score
        state.score = 0
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=0, delta=delta)
