"""
Text Type - Typewriter widget

Textual widget that types a queue of sentences with a blinking cursor.
The engine is driven with set_timer (one pending tick at a time) and the
cursor fade is redrawn with set_interval.
"""

import logging
import time
from dataclasses import replace
from typing import Callable, Optional

from rich.text import Text
from textual.color import Color
from textual.message import Message
from textual.timer import Timer
from textual.widgets import Static

from .config import TextTypeConfig
from .constants import CURSOR_FRAME_RATE, MIN_TIMER_DELAY
from .cursor import CursorBlink
from .engine import TypingEngine, TypingFrame
from .scheduler import TypingDriver

logger = logging.getLogger(__name__)


class TextType(Static):
    """Typewriter text with an optional blinking cursor."""

    DEFAULT_CSS = """
    TextType {
        width: auto;
        height: auto;
    }
    """

    class SentenceComplete(Message):
        """Posted after a sentence has been fully deleted."""

        def __init__(self, text: str, index: int) -> None:
            super().__init__()
            self.text = text
            self.index = index

    def __init__(
        self,
        config: TextTypeConfig,
        speed_multiplier: Optional[float] = None,
        blink_clock: Callable[[], float] = time.monotonic,
        **kwargs,
    ):
        """Initialize the widget.

        Args:
            config: Session settings
            speed_multiplier: Passed to the driver (default: TEXT_TYPE_SPEED)
            blink_clock: Monotonic time source for the cursor blink
        """
        super().__init__(**kwargs)
        self._user_config = config
        self._blink_clock = blink_clock
        self._engine = TypingEngine(self._wrap_config(config))
        self._driver = TypingDriver(self._engine, self._set_tick_timer, speed_multiplier)
        self._driver.add_listener(self._on_frame)
        self._cursor_blink = CursorBlink(config.cursor_blink_duration, blink_clock)
        self._cursor_timer: Optional[Timer] = None

    def _set_tick_timer(self, delay: float, callback: Callable[[], None]) -> Timer:
        return self.set_timer(max(delay, MIN_TIMER_DELAY), callback)

    def _wrap_config(self, config: TextTypeConfig) -> TextTypeConfig:
        """Route completions through the widget so it can post a message."""
        return replace(config, on_sentence_complete=self._sentence_complete)

    def _sentence_complete(self, text: str, index: int) -> None:
        logger.debug(f"Sentence {index} complete: {text!r}")
        if self._user_config.on_sentence_complete is not None:
            self._user_config.on_sentence_complete(text, index)
        self.post_message(self.SentenceComplete(text, index))

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def on_mount(self) -> None:
        """Start typing and blinking once the widget is on screen."""
        self._driver.start()
        self._start_blink()

    def on_unmount(self) -> None:
        self._driver.stop()
        self._stop_blink()

    def configure(self, config: TextTypeConfig) -> None:
        """Replace the config at runtime. Typing restarts from the beginning."""
        self._user_config = config
        self._driver.reconfigure(self._wrap_config(config))
        self._cursor_blink = CursorBlink(config.cursor_blink_duration, self._blink_clock)
        self._start_blink()

    def restart(self) -> None:
        """Start the current config over from the first sentence."""
        self._driver.start()

    def _start_blink(self) -> None:
        """Start cursor blinking (replacing any running blink timer)."""
        self._stop_blink()
        if not self._user_config.show_cursor:
            return
        self._cursor_blink.start()
        self._cursor_timer = self.set_interval(1 / CURSOR_FRAME_RATE, self.refresh)

    def _stop_blink(self) -> None:
        if self._cursor_timer is not None:
            self._cursor_timer.stop()
            self._cursor_timer = None
        self._cursor_blink.stop()

    def _on_frame(self, frame: TypingFrame) -> None:
        self.refresh()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def engine(self) -> TypingEngine:
        return self._engine

    @property
    def is_typing(self) -> bool:
        """True while another tick is scheduled."""
        return self._driver.is_running

    @property
    def displayed_text(self) -> str:
        return self._engine.displayed_text

    @property
    def cursor_visible(self) -> bool:
        """Whether the cursor is drawn at all (ignores blink opacity)."""
        return self._user_config.show_cursor and not self._engine.cursor_suppressed

    @property
    def cursor_opacity(self) -> float:
        return self._cursor_blink.opacity()

    def _cursor_color(self, text_color: str) -> str:
        """Fade from the background toward the text color by blink opacity."""
        _, background = self.background_colors
        return background.blend(Color.parse(text_color), self._cursor_blink.opacity()).hex6

    def render(self) -> Text:
        color = self._engine.color
        text = Text(self._engine.displayed_text, style=color)
        if self.cursor_visible:
            text.append(self._user_config.cursor_character, style=self._cursor_color(color))
        return text
