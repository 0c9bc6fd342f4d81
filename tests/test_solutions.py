# tests/test_solutions.py
import pytest
from tests.helpers_imports import mod

sol = mod.solutions
inputs_mod = mod.inputs


@pytest.fixture(scope="module")
def puzzle_inputs():
    return inputs_mod.PuzzleInputs()


def test_shipped_inputs_are_found(puzzle_inputs):
    assert puzzle_inputs.available() == ["day02", "day07", "day09"]
    assert puzzle_inputs.program("day09")[:2] == [1102, 34463338]


@pytest.mark.parametrize("day,key", [(7, "day07"), ("7", "day07"), ("07", "day07"), ("Day9", "day09")])
def test_day_key(day, key):
    assert inputs_mod.day_key(day) == key


def test_program_returns_a_fresh_copy(puzzle_inputs):
    first = puzzle_inputs.program(2)
    first[0] = -1
    assert puzzle_inputs.program(2)[0] != -1


def test_missing_day_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        inputs_mod.PuzzleInputs(tmp_path).program(5)
    assert inputs_mod.PuzzleInputs(tmp_path / "absent").available() == []


def test_custom_data_dir(tmp_path):
    (tmp_path / "day02.txt").write_text("1,0,0,0,99\n", encoding="utf-8")
    pi = inputs_mod.PuzzleInputs(tmp_path)
    assert pi.available() == ["day02"]
    assert pi.program("2") == [1, 0, 0, 0, 99]


@pytest.mark.parametrize("day,part,answer", [
    (2, 1, 3516593),
    (2, 2, 7749),
    (7, 1, 87138),
    (7, 2, 17279674),
    (9, 1, 3518157894),
    (9, 2, 80379),
])
def test_answers(puzzle_inputs, day, part, answer):
    assert sol.solve(day, part, puzzle_inputs) == answer


def test_day07_with_process_pool(puzzle_inputs):
    assert sol.day07_part1(puzzle_inputs, workers=2) == 87138


def test_noun_verb_leaves_input_untouched(puzzle_inputs):
    program = puzzle_inputs.program(2)
    before = list(program)
    sol.run_noun_verb(program, 12, 2)
    assert program == before


def test_unreachable_target_raises(puzzle_inputs):
    with pytest.raises(ValueError):
        sol.day02_part2(puzzle_inputs, target=-1)


def test_unknown_day_raises():
    with pytest.raises(KeyError):
        sol.solve(4, 1)
