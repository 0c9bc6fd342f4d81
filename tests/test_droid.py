# tests/test_droid.py
import pytest
from tests.helpers_imports import mod

Droid = mod.droid.Droid

# Prints ">\n", then echoes each input character; a newline re-prompts, 'q' halts.
ECHO = [
    104, 62, 104, 10, 3, 100, 1008, 100, 113, 101, 1005, 101, 25, 4, 100,
    1008, 100, 10, 101, 1005, 101, 0, 1105, 1, 4, 99,
]
# Prints "ok\n" followed by a value too large for ASCII, then halts.
ANSWER = [104, 111, 104, 107, 104, 10, 104, 19349722, 99]


def test_boot_stops_at_first_prompt():
    d = Droid(ECHO)
    assert d.boot() == ">\n"
    assert d.waiting and not d.halted
    assert d.lines == [">"]


def test_send_echoes_and_reprompts():
    d = Droid(ECHO)
    d.boot()
    assert d.send("go") == "go\n>\n"
    assert d.waiting
    assert d.commands == ["go"]
    assert d.lines == [">", "go", ">"]


def test_quit_command_halts_program():
    d = Droid(ECHO)
    d.boot()
    assert d.send("q") == ""
    assert d.halted
    with pytest.raises(RuntimeError):
        d.send("again")


def test_play_boots_and_stops_after_halt():
    d = Droid(ECHO)
    text = d.play(["north", "q", "never sent"])
    assert text == ">\nnorth\n>\n"
    assert d.halted
    assert d.commands == ["north", "q"]
    assert d.transcript() == ">\nnorth\n>"


def test_non_ascii_outputs_are_collected_as_values():
    d = Droid(ANSWER)
    assert d.boot() == "ok\n"
    assert d.halted
    assert d.values == [19349722]
    assert d.lines == ["ok"]


def test_partial_line_is_kept_until_newline():
    d = Droid([104, 72, 104, 105, 3, 20, 99])
    assert d.boot() == "Hi"
    assert d.partial_line == "Hi"
    assert d.lines == []
    assert d.transcript() == "Hi"
