"""
Tests for TypingEngine

Pure state machine tests: step() is called directly, no timers involved.

Run with: pytest tests/test_engine.py -v
"""

import random
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from text_type.config import SpeedRange, TextTypeConfig
from text_type.constants import DEFAULT_TEXT_COLOR
from text_type.engine import Phase, TypingEngine


def run(engine, max_steps=100):
    """Step until finished (or max_steps), returning (text, delay) per tick."""
    ticks = []
    for _ in range(max_steps):
        delay = engine.step()
        ticks.append((engine.displayed_text, delay))
        if delay is None:
            break
    return ticks


def visible_sequence(ticks):
    """Displayed texts with consecutive duplicates collapsed."""
    seq = []
    for text, _ in ticks:
        if not seq or seq[-1] != text:
            seq.append(text)
    return seq


class TestInitialState:
    """Tests for a freshly built engine."""

    def test_starts_typing_first_string(self):
        """New engine is typing index 0 with nothing displayed."""
        engine = TypingEngine(TextTypeConfig(["ab", "cd"]))
        assert engine.phase is Phase.TYPING
        assert engine.active_index == 0
        assert engine.char_index == 0
        assert engine.displayed_text == ""
        assert engine.is_finished is False

    def test_start_delay_is_initial_delay(self):
        """First tick waits initial_delay."""
        engine = TypingEngine(TextTypeConfig("ab", initial_delay=750))
        assert engine.start_delay() == 750


class TestSingleStringNoLoop:
    """A single string without looping is typed once and left on screen."""

    def test_types_then_stops(self):
        """Types each character, then reports no further ticks."""
        engine = TypingEngine(TextTypeConfig("ab", loop=False))
        ticks = run(engine)
        assert [text for text, _ in ticks] == ["a", "ab"]
        assert ticks[-1][1] is None
        assert engine.is_finished

    def test_never_deletes(self):
        """Terminal state stays in Typing with the full string shown."""
        engine = TypingEngine(TextTypeConfig("ab", loop=False))
        run(engine)
        assert engine.phase is Phase.TYPING
        assert engine.step() is None
        assert engine.displayed_text == "ab"

    def test_no_completion_callback(self):
        """Nothing is deleted, so nothing is completed."""
        calls = []
        engine = TypingEngine(TextTypeConfig(
            "ab", loop=False, on_sentence_complete=lambda t, i: calls.append((t, i)),
        ))
        run(engine)
        assert calls == []

    def test_empty_string_finishes_immediately(self):
        """An empty single string has nothing to type."""
        engine = TypingEngine(TextTypeConfig("", loop=False))
        assert engine.step() is None
        assert engine.is_finished


class TestMultipleStringsNoLoop:
    """Every string is typed and deleted once, then the engine halts."""

    def test_visible_sequence(self):
        """Both strings are typed and deleted in order."""
        engine = TypingEngine(TextTypeConfig(["ab", "cd"], loop=False))
        ticks = run(engine)
        assert visible_sequence(ticks) == ["a", "ab", "a", "", "c", "cd", "c", ""]
        assert engine.is_finished

    def test_completion_callbacks_in_order(self):
        """Each string completes exactly once, with its index."""
        calls = []
        engine = TypingEngine(TextTypeConfig(
            ["ab", "cd"], loop=False, on_sentence_complete=lambda t, i: calls.append((t, i)),
        ))
        run(engine)
        assert calls == [("ab", 0), ("cd", 1)]

    def test_does_not_restart_at_first_string(self):
        """Halts on the last index with empty text."""
        engine = TypingEngine(TextTypeConfig(["ab", "cd"], loop=False))
        run(engine)
        assert engine.active_index == 1
        assert engine.displayed_text == ""

    def test_callback_fires_when_text_is_empty(self):
        """Completion happens only after the text is fully deleted."""
        seen = []
        engine = TypingEngine(TextTypeConfig(
            ["ab", "cd"], loop=False,
            on_sentence_complete=lambda t, i: seen.append(engine.displayed_text),
        ))
        run(engine)
        assert seen == ["", ""]


class TestLooping:
    """Tests for loop=True."""

    def test_single_string_cycles(self):
        """One string types and deletes forever, staying at index 0."""
        calls = []
        engine = TypingEngine(TextTypeConfig(
            "ab", loop=True, on_sentence_complete=lambda t, i: calls.append((t, i)),
        ))
        ticks = run(engine, max_steps=18)
        # 6 ticks per cycle: a, ab, start deleting, a, "", complete
        assert visible_sequence(ticks) == ["a", "ab", "a", "", "a", "ab", "a", "", "a", "ab", "a", ""]
        assert calls == [("ab", 0)] * 3
        assert engine.active_index == 0
        assert not engine.is_finished

    def test_multiple_strings_wrap_around(self):
        """After the last string the first one comes back."""
        calls = []
        engine = TypingEngine(TextTypeConfig(
            ["ab", "cd"], loop=True, on_sentence_complete=lambda t, i: calls.append(i),
        ))
        # 6 ticks per two-character string
        for _ in range(18):
            assert engine.step() is not None
        assert calls == [0, 1, 0]
        assert engine.active_index == 1

    def test_index_wraps_to_zero(self):
        """Index advances modulo the queue length."""
        engine = TypingEngine(TextTypeConfig(["a", "b"], loop=True))
        # "a": type, start deleting, delete, complete -> index 1
        for _ in range(4):
            engine.step()
        assert engine.active_index == 1
        for _ in range(4):
            engine.step()
        assert engine.active_index == 0
        assert engine.phase is Phase.TYPING


class TestDelays:
    """Tests for the delay returned by each tick."""

    def make(self, **kwargs):
        kwargs.setdefault("typing_speed", 10)
        kwargs.setdefault("deleting_speed", 5)
        kwargs.setdefault("pause_duration", 100)
        return TypingEngine(TextTypeConfig(["ab", "cd"], **kwargs))

    def test_delay_per_transition(self):
        """Typing, pause, deleting and pause delays in table order."""
        engine = self.make()
        delays = [engine.step() for _ in range(6)]
        # a, ab, start deleting, a, "", complete
        assert delays == [10, 10, 100, 5, 5, 100]

    def test_deleting_ignores_variable_speed(self):
        """Variable speed only applies while typing."""
        engine = self.make(variable_speed=SpeedRange(200, 300))
        delays = [engine.step() for _ in range(6)]
        assert 200 <= delays[0] <= 300
        assert delays[2] == 100
        assert delays[3:5] == [5, 5]

    def test_degenerate_range_matches_fixed_speed(self):
        """A {10, 10} range behaves like typing_speed=10."""
        fixed = self.make(typing_speed=10)
        ranged = self.make(typing_speed=999, variable_speed=SpeedRange(10, 10))
        assert [fixed.step() for _ in range(12)] == [ranged.step() for _ in range(12)]

    def test_injected_rng_is_used(self):
        """Per-character delays come from the injected random source."""
        rng = random.Random(42)
        expected = random.Random(42)
        engine = TypingEngine(
            TextTypeConfig("abc", variable_speed=SpeedRange(10, 50)), rng=rng,
        )
        delays = [engine.step() for _ in range(3)]
        assert delays == [expected.uniform(10, 50) for _ in range(3)]


class TestReverseMode:
    """Tests for reverse_mode=True."""

    def test_types_reversed_buffer(self):
        """The characters of abc appear as c, cb, cba and are deleted back to empty."""
        engine = TypingEngine(TextTypeConfig("abc", reverse_mode=True))
        ticks = run(engine, max_steps=8)
        assert visible_sequence(ticks)[:6] == ["c", "cb", "cba", "cb", "c", ""]

    def test_active_string_reversed_per_index(self):
        """Each new index gets its own reversed string."""
        engine = TypingEngine(TextTypeConfig(["ab", "xyz"], reverse_mode=True))
        assert engine.active_string == "ba"
        for _ in range(6):
            engine.step()
        assert engine.active_index == 1
        assert engine.active_string == "zyx"

    def test_callback_gets_original_text(self):
        """Completion reports the string as configured, not reversed."""
        calls = []
        engine = TypingEngine(TextTypeConfig(
            "abc", reverse_mode=True, on_sentence_complete=lambda t, i: calls.append(t),
        ))
        run(engine, max_steps=8)
        assert calls == ["abc"]


class TestColors:
    """Tests for palette color selection."""

    def test_default_color_without_palette(self):
        """No palette means the default color."""
        engine = TypingEngine(TextTypeConfig(["a", "b"]))
        assert engine.color == DEFAULT_TEXT_COLOR

    def test_palette_cycles_by_index(self):
        """Colors repeat when there are more strings than colors."""
        engine = TypingEngine(TextTypeConfig(["a", "b", "c"], text_colors=["red", "blue"]))
        colors = [engine.color]
        for _ in range(8):
            engine.step()
            if engine.color != colors[-1]:
                colors.append(engine.color)
        # index 0 -> red, 1 -> blue, 2 -> red
        assert colors == ["red", "blue", "red"]

    def test_color_changes_with_index(self):
        """Every frame's color matches its own index."""
        engine = TypingEngine(TextTypeConfig(["a", "b"], text_colors=["red", "blue"]))
        for _ in range(4):
            engine.step()
            frame = engine.snapshot()
            expected = ["red", "blue"][frame.index]
            assert frame.color == expected


class TestCursorSuppression:
    """Tests for hide_cursor_while_typing."""

    def test_never_suppressed_when_disabled(self):
        """Without the flag the cursor is never suppressed."""
        engine = TypingEngine(TextTypeConfig("ab"))
        for _ in range(6):
            assert engine.cursor_suppressed is False
            engine.step()

    def test_suppressed_mid_typing_and_deleting(self):
        """Hidden while characters remain or are being deleted."""
        engine = TypingEngine(TextTypeConfig("ab", hide_cursor_while_typing=True))
        assert engine.cursor_suppressed          # nothing typed yet
        engine.step()                            # "a"
        assert engine.cursor_suppressed
        engine.step()                            # "ab", complete
        assert not engine.cursor_suppressed
        engine.step()                            # start deleting
        assert engine.cursor_suppressed
        engine.step()                            # "a"
        engine.step()                            # ""
        assert engine.cursor_suppressed
        engine.step()                            # next cycle, typing again
        assert engine.cursor_suppressed

    def test_shown_in_terminal_state(self):
        """A finished single string shows the cursor again."""
        engine = TypingEngine(TextTypeConfig("ab", loop=False, hide_cursor_while_typing=True))
        run(engine)
        assert engine.cursor_suppressed is False


class TestInvariants:
    """Properties that hold on every tick."""

    @pytest.mark.parametrize("config", [
        TextTypeConfig(["hello", "hi", ""], loop=True),
        TextTypeConfig(["abc", "de"], loop=False, reverse_mode=True),
        TextTypeConfig("xyz", loop=True, variable_speed=SpeedRange(1, 5)),
    ])
    def test_displayed_is_prefix_of_active_string(self, config):
        """Displayed text is always a prefix of the active string."""
        engine = TypingEngine(config, rng=random.Random(0))
        for _ in range(60):
            assert len(engine.displayed_text) <= len(engine.active_string)
            assert engine.active_string.startswith(engine.displayed_text)
            assert engine.phase in (Phase.TYPING, Phase.DELETING)
            if engine.step() is None:
                break

    def test_no_overlap_between_strings(self):
        """The text is empty whenever the index changes."""
        engine = TypingEngine(TextTypeConfig(["ab", "cd"], loop=True))
        previous_index = engine.active_index
        for _ in range(40):
            engine.step()
            if engine.active_index != previous_index:
                assert engine.displayed_text == ""
                previous_index = engine.active_index


class TestReconfigure:
    """Tests for configure() and reset()."""

    def test_configure_resets_state(self):
        """A new config starts over at index 0."""
        engine = TypingEngine(TextTypeConfig(["ab", "cd"]))
        for _ in range(7):
            engine.step()
        assert engine.active_index == 1

        engine.configure(TextTypeConfig("xyz"))
        assert engine.active_index == 0
        assert engine.char_index == 0
        assert engine.displayed_text == ""
        assert engine.phase is Phase.TYPING
        assert engine.active_string == "xyz"

    def test_reset_clears_finished(self):
        """A finished engine can be started again."""
        engine = TypingEngine(TextTypeConfig("a", loop=False))
        run(engine)
        assert engine.is_finished
        engine.reset()
        assert not engine.is_finished
        assert engine.step() is None
        assert engine.displayed_text == "a"

    def test_configure_from_completion_callback_starts_at_first_string(self):
        """Reconfiguring inside on_sentence_complete isn't overridden by the advance."""
        def switch(text, index):
            engine.configure(TextTypeConfig(["xyz", "q"], initial_delay=7))

        engine = TypingEngine(TextTypeConfig(["ab", "cd"], on_sentence_complete=switch))
        delays = [engine.step() for _ in range(6)]  # a, ab, delete, a, "", complete
        assert delays[-1] == 7
        assert engine.active_index == 0
        assert engine.active_string == "xyz"
        assert engine.displayed_text == ""
        assert engine.phase is Phase.TYPING
        engine.step()
        assert engine.displayed_text == "x"

    def test_reset_from_completion_callback_of_last_string(self):
        """A reset in the final callback is not turned into a halt."""
        def again(text, index):
            if index == 1:
                engine.reset()

        engine = TypingEngine(TextTypeConfig(
            ["a", "b"], loop=False, initial_delay=3, on_sentence_complete=again,
        ))
        # 4 ticks per one-character string: type, start deleting, delete, complete
        delays = [engine.step() for _ in range(8)]
        assert delays[-1] == 3
        assert engine.active_index == 0
        assert engine.displayed_text == ""
        assert not engine.is_finished
