from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # weak=False keeps bound methods of systems alive even when nobody holds the system.
        sig.connect(fn, weak=False)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float (optional)


# ============================================================================
# GAME FLOW
# ============================================================================
EVENT_NEW_GAME_REQUEST = "new_game_request"        # payload: None
EVENT_BOARD_GENERATED = "board_generated"          # payload: reason=str, rows=int, cols=int, attempts=int
EVENT_BOARD_LOADED = "board_loaded"                # payload: rows=int, cols=int
EVENT_PHASE_CHANGED = "phase_changed"              # payload: previous=Phase, phase=Phase
EVENT_SCORE_CHANGED = "score_changed"              # payload: score=int, delta=int


# ============================================================================
# TILE & BOARD MECHANICS
# ============================================================================
EVENT_TILE_SWAP_REQUEST = "tile_swap_request"      # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_VALID = "tile_swap_valid"          # payload: src=(r,c), dst=(r,c), matches=list[Match]
EVENT_TILE_SWAP_INVALID = "tile_swap_invalid"      # payload: src, dst, reason=RejectReason
EVENT_MATCH_FOUND = "match_found"                  # payload: matches=list[Match], positions=[(r,c),...], depth=int
EVENT_MATCH_CLEARED = "match_cleared"              # payload: matches=list[Match], positions=[(r,c),...], depth=int
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=list[GravityMove]
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tiles=[(r,c),...]
EVENT_CASCADE_STEP = "cascade_step"                # payload: depth=int, positions=[(r,c),...], source=str
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int, match_count=int, cells_cleared=int
