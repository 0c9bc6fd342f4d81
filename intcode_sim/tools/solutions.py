# solutions.py: the Intcode days, solved on the shared machine
from typing import Callable, Dict, Optional, Tuple

from ..core.cpu import Machine
from .amplifiers import max_thrust_feedback, max_thrust_serial
from .inputs import PuzzleInputs

GRAVITY_ASSIST_TARGET = 19690720
BOOST_TEST_MODE = 1
BOOST_SENSOR_MODE = 2


def _inputs(inputs: Optional[PuzzleInputs]) -> PuzzleInputs:
    return inputs if inputs is not None else PuzzleInputs()


# ---- day 2: 1202 program alarm ----

def run_noun_verb(program, noun: int, verb: int) -> int:
    prg = list(program)
    prg[1] = noun
    prg[2] = verb
    m = Machine(prg)
    m.run_until_halted()
    return m.memory.read(0)


def day02_part1(inputs: Optional[PuzzleInputs] = None) -> int:
    return run_noun_verb(_inputs(inputs).program(2), 12, 2)


def day02_part2(inputs: Optional[PuzzleInputs] = None, target: int = GRAVITY_ASSIST_TARGET) -> int:
    program = _inputs(inputs).program(2)
    for noun in range(100):
        for verb in range(100):
            if run_noun_verb(program, noun, verb) == target:
                return 100 * noun + verb
    raise ValueError(f"No noun/verb pair produces {target}")


# ---- day 7: amplification circuit ----

def day07_part1(inputs: Optional[PuzzleInputs] = None, workers: Optional[int] = None) -> int:
    return max_thrust_serial(_inputs(inputs).program(7), workers=workers)


def day07_part2(inputs: Optional[PuzzleInputs] = None, workers: Optional[int] = None) -> int:
    return max_thrust_feedback(_inputs(inputs).program(7), workers=workers)


# ---- day 9: sensor boost ----

def run_boost(program, mode: int) -> Optional[int]:
    return Machine(program, extended=True).run_with_input(mode)


def day09_part1(inputs: Optional[PuzzleInputs] = None) -> Optional[int]:
    return run_boost(_inputs(inputs).program(9), BOOST_TEST_MODE)


def day09_part2(inputs: Optional[PuzzleInputs] = None) -> Optional[int]:
    return run_boost(_inputs(inputs).program(9), BOOST_SENSOR_MODE)


SOLUTIONS: Dict[Tuple[int, int], Callable] = {
    (2, 1): day02_part1,
    (2, 2): day02_part2,
    (7, 1): day07_part1,
    (7, 2): day07_part2,
    (9, 1): day09_part1,
    (9, 2): day09_part2,
}


def solve(day: int, part: int, inputs: Optional[PuzzleInputs] = None, workers: Optional[int] = None):
    fn = SOLUTIONS.get((day, part))
    if fn is None:
        raise KeyError(f"No solution registered for day {day} part {part}")
    if day == 7:
        return fn(inputs, workers=workers)
    return fn(inputs)
