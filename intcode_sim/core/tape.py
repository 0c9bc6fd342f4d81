# tape.py: MemoryTape, InputQueue, OutputTape
from collections import deque
from typing import Iterable, List, Optional

from .errors import AddressError, InputExhaustedError


class MemoryTape:
    """
    Flat integer-addressed tape holding both code and data.
    Fixed size unless `grow` is set, in which case reads and writes past the
    end extend the tape with zeros. Negative addresses are always invalid.
    """

    def __init__(self, values: Iterable[int], grow: bool = False):
        self.cells: List[int] = list(values)
        self.grow = grow
        self.max_address = -1

    def __len__(self) -> int:
        return len(self.cells)

    def _touch(self, index: int):
        if index > self.max_address:
            self.max_address = index

    def _check(self, index: int):
        if index < 0:
            raise AddressError(f"Negative address {index}")
        if index >= len(self.cells):
            if not self.grow:
                raise AddressError(f"Address {index} out of range (size {len(self.cells)})")
            self.cells.extend([0] * (1 + index - len(self.cells)))

    def read(self, index: int) -> int:
        self._check(index)
        self._touch(index)
        return self.cells[index]

    def write(self, index: int, value: int):
        self._check(index)
        self.cells[index] = value
        self._touch(index)

    def snapshot(self) -> List[int]:
        return list(self.cells)


class InputQueue:
    def __init__(self, values: Optional[Iterable[int]] = None):
        self._queue = deque(values or ())
        self.consumed = 0

    def __len__(self) -> int:
        return len(self._queue)

    def push(self, value: int):
        self._queue.append(int(value))

    def extend(self, values: Iterable[int]):
        for v in values:
            self.push(v)

    def read_next(self) -> Optional[int]:
        if not self._queue:
            return None
        self.consumed += 1
        return self._queue.popleft()

    def read_required(self, ip: int) -> int:
        v = self.read_next()
        if v is None:
            raise InputExhaustedError(f"Input queue empty at ip={ip}")
        return v

    def pending(self) -> List[int]:
        return list(self._queue)


class OutputTape:
    """Append-only log of every value a machine emitted."""

    def __init__(self):
        self.values: List[int] = []

    def write(self, value: int) -> int:
        self.values.append(value)
        return len(self.values) - 1

    def record_count(self) -> int:
        return len(self.values)

    def last(self) -> Optional[int]:
        return self.values[-1] if self.values else None
