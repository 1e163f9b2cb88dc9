"""
Text Type - Demo app and command line entry point

    text-type "Hello world!" "Second sentence" --typing-speed 80
    text-type --config sentences.json
    text-type "abc" --no-loop --dump 20     # print the timeline, no UI

Set TEXT_TYPE_SPEED=2 to run everything twice as fast.
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import Optional, Sequence

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Center, Middle

from .config import ConfigurationError, SpeedRange, TextTypeConfig, load_config
from .constants import DEMO_COLORS, DEMO_TEXT
from .engine import TypingEngine
from .scheduler import ManualScheduler, TypingDriver
from .widget import TextType

logger = logging.getLogger(__name__)


class TextTypeApp(App):
    """Shows a single TextType widget centered on screen."""

    CSS = """
    Screen {
        background: #1c1c1e;
    }

    TextType {
        text-style: bold;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("escape", "quit", "Quit", show=False),
        Binding("r", "restart", "Restart"),
    ]

    def __init__(self, config: TextTypeConfig, **kwargs):
        super().__init__(**kwargs)
        self._text_config = config

    def compose(self) -> ComposeResult:
        with Middle():
            with Center():
                yield TextType(self._text_config, id="text-type")

    def action_restart(self) -> None:
        self.query_one(TextType).restart()

    def on_text_type_sentence_complete(self, message: TextType.SentenceComplete) -> None:
        logger.info(f"Finished sentence {message.index}: {message.text!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="text-type",
        description="Type sentences like a typewriter, then delete them again.",
    )
    parser.add_argument("text", nargs="*", help="Sentences to type, in order")
    parser.add_argument("--config", metavar="FILE", help="JSON config file")
    parser.add_argument("--typing-speed", type=float, metavar="MS")
    parser.add_argument("--deleting-speed", type=float, metavar="MS")
    parser.add_argument("--pause", type=float, metavar="MS", dest="pause_duration")
    parser.add_argument("--initial-delay", type=float, metavar="MS")
    parser.add_argument("--no-loop", action="store_false", dest="loop", default=None,
                        help="Stop after the last sentence")
    parser.add_argument("--reverse", action="store_true", dest="reverse_mode", default=None,
                        help="Type each sentence back to front")
    parser.add_argument("--variable-speed", type=float, nargs=2, metavar=("MIN", "MAX"),
                        help="Random typing delay range in ms")
    parser.add_argument("--color", action="append", dest="text_colors", metavar="COLOR",
                        help="Text color, repeat to cycle colors per sentence")
    parser.add_argument("--hide-cursor-while-typing", action="store_true", default=None)
    parser.add_argument("--no-cursor", action="store_false", dest="show_cursor", default=None)
    parser.add_argument("--cursor", dest="cursor_character", metavar="CHAR")
    parser.add_argument("--blink", type=float, dest="cursor_blink_duration", metavar="MS")
    parser.add_argument("--dump", type=int, metavar="N",
                        help="Print the first N frames instead of starting the UI")
    parser.add_argument("--log-file", metavar="PATH", help="Write debug logs here")
    return parser


# Argument names that map straight onto TextTypeConfig fields
_OVERRIDES = (
    "typing_speed",
    "deleting_speed",
    "pause_duration",
    "initial_delay",
    "loop",
    "reverse_mode",
    "hide_cursor_while_typing",
    "show_cursor",
    "cursor_character",
    "cursor_blink_duration",
    "text_colors",
)


def config_from_args(args: argparse.Namespace) -> TextTypeConfig:
    """Build the session config: config file first, then flags on top."""
    if args.config:
        config = load_config(args.config)
    elif args.text:
        config = TextTypeConfig(text=args.text)
    else:
        config = TextTypeConfig(text=DEMO_TEXT, text_colors=DEMO_COLORS)

    if args.config and args.text:
        config = replace(config, text=args.text)

    overrides = {
        name: getattr(args, name)
        for name in _OVERRIDES
        if getattr(args, name) is not None
    }
    if args.variable_speed:
        overrides["variable_speed"] = SpeedRange(*args.variable_speed)
    return replace(config, **overrides) if overrides else config


def dump_timeline(config: TextTypeConfig, frames: int, out=None) -> None:
    """Run the engine in virtual time and print each frame.

    Lines are tab separated: elapsed ms, sentence index, phase, text.
    """
    out = out if out is not None else sys.stdout
    scheduler = ManualScheduler()
    driver = TypingDriver(TypingEngine(config), scheduler.set_timer, speed_multiplier=1.0)
    driver.start()

    for _ in range(frames):
        if not scheduler.run_next():
            break
        frame = driver.engine.snapshot()
        elapsed = round(scheduler.now * 1000)
        print(f"{elapsed}\t{frame.index}\t{frame.phase.value}\t{frame.text}", file=out)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for text-type"""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Textual owns the terminal, so only log when asked to
    if args.log_file:
        logging.basicConfig(
            filename=args.log_file,
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        )

    try:
        config = config_from_args(args)
    except (ConfigurationError, OSError) as e:
        parser.error(str(e))

    if args.dump is not None:
        dump_timeline(config, args.dump)
        return 0

    TextTypeApp(config).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
