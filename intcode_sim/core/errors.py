# errors.py: fatal machine conditions
# Every error here aborts the run; the machine never recovers from one.


class IntcodeError(Exception):
    """Base class for every machine fault."""


class UnknownOpcodeError(IntcodeError, ValueError):
    pass


class UnknownModeError(IntcodeError, ValueError):
    pass


class InvalidWriteModeError(IntcodeError, ValueError):
    """A write parameter was encoded in immediate mode."""


class AddressError(IntcodeError, IndexError):
    pass


class InputExhaustedError(IntcodeError, RuntimeError):
    """Input executed with an empty queue on a non-interactive machine."""
