# opcodes.py: opcode map, arities and instruction encode/decode
from enum import IntEnum
from typing import Iterable, Tuple

from .encoding import Mode, pack_modes, split_modes
from .errors import UnknownOpcodeError


class Op(IntEnum):
    ADD = 1
    MULTIPLY = 2
    INPUT = 3
    OUTPUT = 4
    JUMP_IF_TRUE = 5
    JUMP_IF_FALSE = 6
    LESS_THAN = 7
    EQUALS = 8
    ADJUST_BASE = 9
    STOP = 99


# Words consumed by each instruction, opcode included
ARITY = {
    Op.ADD:           4,
    Op.MULTIPLY:      4,
    Op.INPUT:         2,
    Op.OUTPUT:        2,
    Op.JUMP_IF_TRUE:  3,
    Op.JUMP_IF_FALSE: 3,
    Op.LESS_THAN:     4,
    Op.EQUALS:        4,
    Op.ADJUST_BASE:   2,
    Op.STOP:          1,
}

# Only the day 9 computer knows about the relative base
EXTENDED_ONLY = frozenset({Op.ADJUST_BASE})

OP = {op.name: op for op in Op}


def to_op(code: int, extended: bool = False) -> Op:
    try:
        op = Op(code)
    except ValueError:
        raise UnknownOpcodeError(f"Unknown opcode {code}")
    if op in EXTENDED_ONLY and not extended:
        raise UnknownOpcodeError(f"Opcode {code} ({op.name}) requires the extended instruction set")
    return op


def decode_op(word: int, extended: bool = False) -> Tuple[Op, Tuple[Mode, Mode, Mode]]:
    if word < 0:
        raise UnknownOpcodeError(f"Negative instruction word {word}")
    return to_op(word % 100, extended), split_modes(word, extended)


def encode_instr(op_name: str, modes: Iterable[int] = ()) -> int:
    op = OP[op_name.upper()]
    return int(op) + pack_modes(modes)
