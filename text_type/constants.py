"""
Text Type - Shared Constants

Central location for defaults used across the engine, widget and CLI.
All durations are in milliseconds.
"""

# =============================================================================
# TIMING
# =============================================================================

DEFAULT_TYPING_SPEED = 50       # Delay between typed characters
DEFAULT_DELETING_SPEED = 30     # Delay between deleted characters
DEFAULT_INITIAL_DELAY = 0       # Delay before the very first tick
DEFAULT_PAUSE_DURATION = 2000   # Dwell at full string and at empty string

# =============================================================================
# CURSOR
# =============================================================================

DEFAULT_CURSOR_CHARACTER = "|"
DEFAULT_CURSOR_BLINK_DURATION = 500  # One half cycle (visible -> hidden)
CURSOR_FRAME_RATE = 20               # Cursor opacity refreshes per second

# Textual timers need a positive interval; zero delays are rounded up to this
MIN_TIMER_DELAY = 0.001              # Seconds

# =============================================================================
# COLORS
# =============================================================================

DEFAULT_TEXT_COLOR = "#ffffff"

# =============================================================================
# ENVIRONMENT
# =============================================================================

SPEED_ENV_VAR = "TEXT_TYPE_SPEED"   # Speed multiplier, >1 is faster

# Used by the demo app when no text is given
DEMO_TEXT = (
    "Hello world!",
    "Typed one character at a time",
    "Deleted just the same way",
)
DEMO_COLORS = ("#ff4d4d", "#4dff4d", "#4d4dff")
