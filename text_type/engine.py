"""
Typing engine - the typewriter state machine.

The engine types the active string one character per tick, pauses, deletes
it again and advances to the next string. It knows nothing about real
time: step() performs exactly one tick and returns the delay (ms) the
caller should wait before the next one, or None once typing has finished.
Scheduling is the driver's job (see scheduler.py).

    Typing   + chars left       -> append one char       (typing speed)
    Typing   + string complete  -> start deleting        (pause)
    Typing   + complete, single string, no loop -> stop
    Deleting + text left        -> remove last char      (deleting speed)
    Deleting + text empty       -> sentence complete,
                                   next string           (pause)
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .config import TextTypeConfig
from .constants import DEFAULT_TEXT_COLOR

logger = logging.getLogger(__name__)


class Phase(Enum):
    TYPING = "typing"
    DELETING = "deleting"


@dataclass(frozen=True)
class TypingFrame:
    """Snapshot of what should be on screen after a tick."""
    text: str
    color: str
    index: int
    phase: Phase
    cursor_suppressed: bool
    finished: bool


class TypingEngine:
    """
    Typewriter state machine for one session at a time.

    Usage:
        engine = TypingEngine(TextTypeConfig(["ab", "cd"]))
        delay = engine.start_delay()
        while delay is not None:
            ...wait delay ms...
            delay = engine.step()

    Args:
        config: Session settings
        rng: Random source for variable speed; anything with a
            uniform(a, b) method. Pass a seeded random.Random in tests.
    """

    def __init__(self, config: TextTypeConfig, rng: Optional[random.Random] = None):
        self._rng = rng if rng is not None else random.Random()
        self._config = config
        self._session = 0
        self.reset()

    def configure(self, config: TextTypeConfig) -> None:
        """Replace the config and start a fresh session."""
        self._config = config
        self.reset()

    def reset(self) -> None:
        """Return to the initial state: typing the first string from scratch."""
        self._session += 1
        self._index = 0
        self._char_index = 0
        self._displayed = ""
        self._phase = Phase.TYPING
        self._finished = False
        self._load_active_string()
        logger.debug(f"Session reset with {len(self._config.texts)} string(s)")

    def _load_active_string(self) -> None:
        text = self._config.texts[self._index]
        self._active = text[::-1] if self._config.reverse_mode else text

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def config(self) -> TextTypeConfig:
        return self._config

    @property
    def displayed_text(self) -> str:
        return self._displayed

    @property
    def active_index(self) -> int:
        return self._index

    @property
    def active_string(self) -> str:
        """The string being typed, already reversed in reverse mode."""
        return self._active

    @property
    def char_index(self) -> int:
        return self._char_index

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_finished(self) -> bool:
        """True once no further ticks will ever happen in this session."""
        return self._finished

    @property
    def color(self) -> str:
        """Text color for the active string."""
        colors = self._config.text_colors
        if not colors:
            return DEFAULT_TEXT_COLOR
        return colors[self._index % len(colors)]

    @property
    def cursor_suppressed(self) -> bool:
        """Whether hide_cursor_while_typing hides the cursor right now."""
        if not self._config.hide_cursor_while_typing:
            return False
        return (
            self._phase is Phase.DELETING
            or self._char_index < len(self._active)
        )

    def snapshot(self) -> TypingFrame:
        return TypingFrame(
            text=self._displayed,
            color=self.color,
            index=self._index,
            phase=self._phase,
            cursor_suppressed=self.cursor_suppressed,
            finished=self._finished,
        )

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def start_delay(self) -> float:
        """Delay before the first tick of a session."""
        return self._config.initial_delay

    def _is_terminal(self) -> bool:
        """A single string without looping is typed once and left on screen."""
        return len(self._config.texts) == 1 and not self._config.loop

    def _typing_delay(self) -> float:
        speed = self._config.variable_speed
        if speed is None:
            return self._config.typing_speed
        return self._rng.uniform(speed.min, speed.max)

    def step(self) -> Optional[float]:
        """Perform one tick.

        Returns:
            Milliseconds until the next tick, or None when finished.
        """
        if self._finished:
            return None

        if self._phase is Phase.TYPING:
            if self._char_index < len(self._active):
                self._displayed += self._active[self._char_index]
                self._char_index += 1
                if self._char_index == len(self._active) and self._is_terminal():
                    self._finished = True
                    logger.debug("Single string typed, nothing left to do")
                    return None
                return self._typing_delay()

            if self._is_terminal():
                # Only reachable for an empty single string
                self._finished = True
                return None
            self._phase = Phase.DELETING
            return self._config.pause_duration

        if self._displayed:
            self._displayed = self._displayed[:-1]
            return self._config.deleting_speed

        return self._complete_sentence()

    def _complete_sentence(self) -> Optional[float]:
        finished_index = self._index
        finished_text = self._config.texts[finished_index]
        callback = self._config.on_sentence_complete
        if callback is not None:
            session = self._session
            callback(finished_text, finished_index)
            if session != self._session:
                # The callback reset or reconfigured us: a new session has
                # already begun at its first string
                return self.start_delay()

        next_index = (finished_index + 1) % len(self._config.texts)
        if next_index == 0 and not self._config.loop:
            self._finished = True
            logger.debug(f"Last string ({finished_index}) done, not looping")
            return None

        self._index = next_index
        self._char_index = 0
        self._phase = Phase.TYPING
        self._load_active_string()
        return self._config.pause_duration
