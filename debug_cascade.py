"""Play a seeded game in the terminal, printing the board after every step.

Run with: ``python debug_cascade.py [seed] [moves]``
"""
import sys, os
ROOT = os.path.dirname(__file__)
SRC = os.path.join(ROOT, 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)
from fruitmatch.events.bus import EVENT_CASCADE_STEP, EVENT_PHASE_CHANGED, EVENT_SCORE_CHANGED
from fruitmatch.session import GameSession
from fruitmatch.systems.board_ops import format_grid


def main(seed: int = 7, moves: int = 5) -> None:
    session = GameSession(seed=seed, eager=False)
    received = []
    for ev in [EVENT_CASCADE_STEP, EVENT_PHASE_CHANGED, EVENT_SCORE_CHANGED]:
        session.event_bus.subscribe(ev, lambda s, _ev=ev, **k: received.append((_ev, k)))

    print(f'seed={seed}')
    print(format_grid(session.snapshot()))
    for move in range(moves):
        swaps = session.valid_swaps()
        if not swaps:
            print('no valid swaps left')
            break
        src, dst = swaps[0]
        result = session.propose_swap(src, dst)
        print(f'\nmove {move + 1}: swap {src}<->{dst} accepted={result.accepted} matches={result.match_count}')
        print(format_grid(session.snapshot()))
        ticks = 0
        while not session.settled:
            session.tick()
            ticks += 1
            print(f'-- tick {ticks}')
            print(format_grid(session.snapshot()))
        print(f'score={session.score}')
    for name, payload in received:
        print(name, payload)


if __name__ == '__main__':
    args = [int(arg) for arg in sys.argv[1:3]]
    main(*args)
