"""Configuration for a typing session.

A TextTypeConfig is immutable: changing any setting means building a new
config and reconfiguring the engine, which starts a fresh session.

Configs can also be loaded from a JSON file of snake_case keys:

    {
        "text": ["Hola mundo!", "Esto es Textual"],
        "typing_speed": 100,
        "variable_speed": {"min": 40, "max": 120},
        "text_colors": ["#ff4d4d", "#4dff4d"]
    }
"""

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from .constants import (
    DEFAULT_TYPING_SPEED,
    DEFAULT_DELETING_SPEED,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_PAUSE_DURATION,
    DEFAULT_CURSOR_CHARACTER,
    DEFAULT_CURSOR_BLINK_DURATION,
    SPEED_ENV_VAR,
)


class ConfigurationError(ValueError):
    """Raised when a typing session cannot be configured."""


def _as_string_tuple(value, name: str) -> tuple[str, ...]:
    """A bare string is one entry; anything else must be an iterable of strings."""
    if isinstance(value, str):
        return (value,)
    try:
        items = tuple(value)
    except TypeError:
        raise ConfigurationError(
            f"{name} must be a string or a list of strings, not {type(value).__name__}"
        ) from None
    for item in items:
        if not isinstance(item, str):
            raise ConfigurationError(
                f"{name} entries must be strings, got {type(item).__name__}"
            )
    return items


@dataclass(frozen=True)
class SpeedRange:
    """Per-character typing delay drawn uniformly from [min, max] ms."""
    min: float
    max: float


@dataclass(frozen=True)
class TextTypeConfig:
    """Settings for one typing session.

    Args:
        text: One string or a sequence of strings, typed in order
        typing_speed: Milliseconds per typed character
        deleting_speed: Milliseconds per deleted character
        initial_delay: Milliseconds before the first tick
        pause_duration: Dwell at the full string and at the empty string
        loop: Restart from the first string after the last one. With a
            single string and loop off, typing stops once it is complete.
        variable_speed: Random per-character typing delay (overrides
            typing_speed, never applies to deletion)
        reverse_mode: Type each string's characters in reverse
        show_cursor: Draw the blinking cursor
        hide_cursor_while_typing: Hide the cursor while characters are
            still being typed or deleted
        cursor_character: Glyph used for the cursor
        cursor_blink_duration: Milliseconds per blink half cycle
        text_colors: Colors cycled by sentence index
        on_sentence_complete: Called with (text, index) each time a
            sentence has been fully deleted
    """
    text: Union[str, Sequence[str]]
    typing_speed: float = DEFAULT_TYPING_SPEED
    deleting_speed: float = DEFAULT_DELETING_SPEED
    initial_delay: float = DEFAULT_INITIAL_DELAY
    pause_duration: float = DEFAULT_PAUSE_DURATION
    loop: bool = True
    variable_speed: Optional[SpeedRange] = None
    reverse_mode: bool = False
    show_cursor: bool = True
    hide_cursor_while_typing: bool = False
    cursor_character: str = DEFAULT_CURSOR_CHARACTER
    cursor_blink_duration: float = DEFAULT_CURSOR_BLINK_DURATION
    text_colors: Sequence[str] = ()
    on_sentence_complete: Optional[Callable[[str, int], None]] = field(
        default=None, compare=False,
    )

    def __post_init__(self):
        # Normalize to tuples so the session can't be mutated from outside
        texts = _as_string_tuple(self.text, "text")
        if not texts:
            raise ConfigurationError("text must contain at least one string")
        object.__setattr__(self, "text", texts)
        object.__setattr__(self, "text_colors", _as_string_tuple(self.text_colors, "text_colors"))

    @property
    def texts(self) -> tuple[str, ...]:
        """The normalized, non-empty text queue."""
        return self.text

    @classmethod
    def from_dict(cls, data: dict) -> "TextTypeConfig":
        """Build a config from plain data (e.g. parsed JSON)."""
        known = {f.name for f in fields(cls)} - {"on_sentence_complete"}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown config keys: {', '.join(sorted(unknown))}"
            )
        if "text" not in data:
            raise ConfigurationError("Config is missing 'text'")

        values = dict(data)
        speed = values.get("variable_speed")
        if speed is not None:
            try:
                values["variable_speed"] = SpeedRange(
                    min=float(speed["min"]), max=float(speed["max"]),
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"variable_speed needs numeric 'min' and 'max': {e}"
                ) from e
        return cls(**values)


def load_config(path: Union[str, Path]) -> TextTypeConfig:
    """Load a session config from a JSON file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise ConfigurationError(f"{path} is not UTF-8 text: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")
    return TextTypeConfig.from_dict(data)


def get_speed_multiplier() -> float:
    """Speed multiplier from TEXT_TYPE_SPEED (>1 is faster).

    Falls back to 1.0 when unset, unparseable or not positive.
    """
    raw = os.environ.get(SPEED_ENV_VAR)
    if not raw:
        return 1.0
    try:
        speed = float(raw)
    except ValueError:
        return 1.0
    return speed if speed > 0 else 1.0
