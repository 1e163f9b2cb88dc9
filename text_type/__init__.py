"""
Text Type - Typewriter text for the terminal

Types a queue of sentences one character at a time, pauses, deletes them
again and moves on to the next one, optionally looping forever.

- TypingEngine: the typing/deleting state machine and its timing
- CursorBlink: independent cursor opacity oscillator
- TextType: Textual widget that drives both with timers
"""

from .config import ConfigurationError, SpeedRange, TextTypeConfig, load_config
from .cursor import CursorBlink
from .engine import Phase, TypingEngine, TypingFrame
from .scheduler import ManualScheduler, TypingDriver

__version__ = "1.0.0"

__all__ = [
    "ConfigurationError",
    "SpeedRange",
    "TextTypeConfig",
    "load_config",
    "CursorBlink",
    "Phase",
    "TypingEngine",
    "TypingFrame",
    "ManualScheduler",
    "TypingDriver",
]
