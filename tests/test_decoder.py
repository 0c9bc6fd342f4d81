# tests/test_decoder.py
import pytest
from tests.helpers_imports import mod

Op = mod.opcodes.Op
Mode = mod.encoding.Mode
errors = mod.errors


def test_decode_multiply_with_immediate_second_operand():
    op, modes = mod.opcodes.decode_op(1002)
    assert op is Op.MULTIPLY
    assert modes == (Mode.POSITION, Mode.IMMEDIATE, Mode.POSITION)


def test_decode_missing_mode_digits_default_to_position():
    op, modes = mod.opcodes.decode_op(3)
    assert op is Op.INPUT
    assert modes == (Mode.POSITION, Mode.POSITION, Mode.POSITION)
    assert mod.opcodes.decode_op(99)[0] is Op.STOP


@pytest.mark.parametrize("word", [0, 10, 98, 100])
def test_unknown_opcode(word):
    with pytest.raises(errors.UnknownOpcodeError):
        mod.opcodes.decode_op(word)


def test_negative_word_is_not_an_instruction():
    with pytest.raises(errors.UnknownOpcodeError):
        mod.opcodes.decode_op(-1)


def test_unknown_mode_digit():
    with pytest.raises(errors.UnknownModeError):
        mod.opcodes.decode_op(301, extended=True)


def test_relative_mode_and_opcode_9_need_extended_set():
    with pytest.raises(errors.UnknownModeError):
        mod.opcodes.decode_op(204)
    with pytest.raises(errors.UnknownOpcodeError):
        mod.opcodes.decode_op(109)

    op, modes = mod.opcodes.decode_op(204, extended=True)
    assert op is Op.OUTPUT and modes[0] is Mode.RELATIVE
    op, modes = mod.opcodes.decode_op(21101, extended=True)
    assert op is Op.ADD
    assert modes == (Mode.IMMEDIATE, Mode.IMMEDIATE, Mode.RELATIVE)


def test_machine_errors_are_also_builtin_errors():
    assert issubclass(errors.UnknownOpcodeError, ValueError)
    assert issubclass(errors.AddressError, IndexError)
    assert issubclass(errors.InputExhaustedError, errors.IntcodeError)


def test_encode_instr_packs_modes():
    assert mod.opcodes.encode_instr("ADD", [1, 1]) == 1101
    assert mod.opcodes.encode_instr("output", [2]) == 204
    assert mod.opcodes.encode_instr("STOP") == 99
    assert mod.encoding.pack_modes([0, 1, 2]) == 21000


def test_arity_counts_opcode_word():
    arity = mod.opcodes.ARITY
    assert arity[Op.ADD] == 4 and arity[Op.EQUALS] == 4
    assert arity[Op.JUMP_IF_TRUE] == 3
    assert arity[Op.INPUT] == 2 and arity[Op.ADJUST_BASE] == 2
    assert arity[Op.STOP] == 1


def test_parse_and_format_program():
    enc = mod.encoding
    assert enc.parse_program("1,9,10,3,\n2,3,11,0,99\n") == [1, 9, 10, 3, 2, 3, 11, 0, 99]
    assert enc.parse_program(" -5 , 7 ") == [-5, 7]
    assert enc.format_program([1, -2, 3]) == "1,-2,3"
    with pytest.raises(ValueError):
        enc.parse_program("1,two,3")


def test_ascii_helpers():
    enc = mod.encoding
    assert enc.encode_ascii("hi") == [104, 105, 10]
    assert enc.encode_ascii("hi", newline=False) == [104, 105]
    assert enc.decode_ascii([72, 105, 10, 1000]) == "Hi\n"
    assert enc.is_ascii(127) and not enc.is_ascii(128) and not enc.is_ascii(-1)
    with pytest.raises(ValueError):
        enc.encode_ascii("café")


def test_decode_is_stable_for_every_opcode():
    for op in Op:
        n_params = mod.opcodes.ARITY[op] - 1
        modes = [Mode.IMMEDIATE] * n_params
        word = mod.opcodes.encode_instr(op.name, modes)
        first = mod.opcodes.decode_op(word, extended=True)
        assert first == mod.opcodes.decode_op(word, extended=True)
        assert first[0] is op
        assert list(first[1][:n_params]) == modes


def test_every_machine_fault_shares_one_base():
    faults = (
        errors.UnknownOpcodeError, errors.UnknownModeError, errors.InvalidWriteModeError,
        errors.AddressError, errors.InputExhaustedError,
    )
    for cls in faults:
        assert issubclass(cls, errors.IntcodeError)
    with pytest.raises(errors.IntcodeError):
        mod.opcodes.decode_op(98)
