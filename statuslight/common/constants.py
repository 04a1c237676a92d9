"""Timing constants shared by the timed primitives and the scheduler."""

# Fade step plan
DEFAULT_FADE_STEPS = 50
MIN_FADE_STEPS = 10
MAX_STEP_INTERVAL = 0.020  # seconds, upper bound for one write + wait

# Every wait is split into slices no longer than this
WAIT_SLICE = 0.010  # seconds

# Advisory window an old effect gets to exit before a new one is launched
DEFAULT_GRACE_PERIOD = 0.050  # seconds

BRIGHTNESS_MIN = 0
BRIGHTNESS_MAX = 255
