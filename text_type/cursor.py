"""Cursor blink oscillator.

Opacity fades 1 -> 0 over one half cycle and back 0 -> 1 over the next,
forever. It is a pure function of the time since start(), so hiding the
cursor for a while (see TypingEngine.cursor_suppressed) never disturbs the
blink phase: when the cursor reappears it is exactly where it would have
been.
"""

import time
from typing import Callable, Optional

from .constants import DEFAULT_CURSOR_BLINK_DURATION


class CursorBlink:
    """Two-phase opacity clock.

    Args:
        duration: Milliseconds per half cycle
        clock: Monotonic time source in seconds (injectable for tests)
    """

    def __init__(
        self,
        duration: float = DEFAULT_CURSOR_BLINK_DURATION,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._duration = duration
        self._clock = clock
        self._started_at: Optional[float] = None

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def is_running(self) -> bool:
        return self._started_at is not None

    def start(self) -> None:
        """Start (or restart) blinking from fully visible."""
        self._started_at = self._clock()

    def stop(self) -> None:
        self._started_at = None

    def opacity(self) -> float:
        """Current opacity in [0, 1]. A stopped cursor is fully opaque."""
        if self._started_at is None or self._duration <= 0:
            return 1.0
        half = self._duration / 1000.0
        elapsed = (self._clock() - self._started_at) % (2 * half)
        if elapsed < half:
            return 1.0 - elapsed / half
        return (elapsed - half) / half

    @property
    def visible(self) -> bool:
        """Two-state view of the oscillator for renderers without alpha."""
        return self.opacity() >= 0.5
