GRID_ROWS = 8
GRID_COLS = 8

# Shortest run of identical fruit that counts as a match.
MATCH_MIN = 3

# Probability that a spawned tile is a fruit rather than a vegetable.
FRUIT_CHANCE = 0.6

# Each match cleared in a round is worth this many points.
POINTS_PER_MATCH = 10

# Whole-board regeneration attempts before giving up (None = unbounded).
MAX_GENERATION_ATTEMPTS = 1000

# Clear/collapse steps a single eager settle may take before it is treated as a fault.
MAX_CASCADE_STEPS = 1000
