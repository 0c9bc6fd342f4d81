# encoding.py: addressing modes, program text codec, ASCII transcript helpers
from enum import IntEnum
from typing import Iterable, List

from .errors import UnknownModeError

NEWLINE = 10
ASCII_MAX = 127


class Mode(IntEnum):
    POSITION = 0
    IMMEDIATE = 1
    RELATIVE = 2


def to_mode(code: int, extended: bool = False) -> Mode:
    if code == Mode.POSITION:
        return Mode.POSITION
    if code == Mode.IMMEDIATE:
        return Mode.IMMEDIATE
    if code == Mode.RELATIVE and extended:
        return Mode.RELATIVE
    raise UnknownModeError(f"Unknown mode code {code}")


def split_modes(word: int, extended: bool = False):
    """Return the three parameter modes of an instruction word, first parameter first."""
    return (
        to_mode((word // 100) % 10, extended),
        to_mode((word // 1000) % 10, extended),
        to_mode((word // 10000) % 10, extended),
    )


def pack_modes(modes: Iterable[int]) -> int:
    packed = 0
    scale = 100
    for m in modes:
        packed += int(m) * scale
        scale *= 10
    return packed


# ---- Program text ----

def parse_program(text: str) -> List[int]:
    """Parse comma-separated signed integers; blank fields and whitespace are ignored."""
    values = []
    for i, tok in enumerate(text.replace("\n", ",").split(",")):
        tok = tok.strip()
        if not tok:
            continue
        try:
            values.append(int(tok))
        except ValueError:
            raise ValueError(f"Invalid program value at field {i}: {tok!r}")
    return values


def format_program(values: Iterable[int]) -> str:
    return ",".join(str(v) for v in values)


# ---- ASCII transcript ----

def encode_ascii(command: str, newline: bool = True) -> List[int]:
    codes = [ord(ch) for ch in command]
    for c in codes:
        if c > ASCII_MAX:
            raise ValueError(f"Non-ASCII character in command: {chr(c)!r}")
    if newline:
        codes.append(NEWLINE)
    return codes


def is_ascii(value: int) -> bool:
    return 0 <= value <= ASCII_MAX


def decode_ascii(values: Iterable[int]) -> str:
    return "".join(chr(v) for v in values if is_ascii(v))
