# droid.py: ASCII text-adventure driver around an interactive machine
from typing import Iterable, List, Sequence

from ..core.cpu import Machine, State
from ..core.encoding import NEWLINE, encode_ascii, is_ascii


class Droid:
    """
    Drives an interactive, extended machine through the ASCII protocol:
    the program prints a transcript and then blocks on input; the caller
    answers with one command line and the program resumes.
    """

    def __init__(self, program: Sequence[int], verbose: bool = False):
        self.machine = Machine(program, extended=True, interactive=True, verbose=verbose)
        self.lines: List[str] = []      # completed transcript lines
        self.values: List[int] = []     # non-ASCII outputs (numeric answers)
        self.commands: List[str] = []
        self._line: List[str] = []

    @property
    def halted(self) -> bool:
        return self.machine.halted

    @property
    def waiting(self) -> bool:
        return self.machine.waiting

    @property
    def partial_line(self) -> str:
        return "".join(self._line)

    def _absorb(self, outputs: Iterable[int]) -> str:
        text = []
        for v in outputs:
            if not is_ascii(v):
                self.values.append(v)
                continue
            ch = chr(v)
            text.append(ch)
            if v == NEWLINE:
                self.lines.append("".join(self._line))
                self._line = []
            else:
                self._line.append(ch)
        return "".join(text)

    def boot(self) -> str:
        """Run until the program first asks for a command (or halts)."""
        _, outs = self.machine.resume()
        return self._absorb(outs)

    def send(self, command: str) -> str:
        if self.machine.state is State.HALTED:
            raise RuntimeError("Droid program has halted; no further commands accepted")
        self.commands.append(command)
        _, outs = self.machine.resume(encode_ascii(command))
        return self._absorb(outs)

    def play(self, commands: Iterable[str]) -> str:
        parts = []
        if not self.commands and not self.lines and not self._line:
            parts.append(self.boot())
        for cmd in commands:
            if self.halted:
                break
            parts.append(self.send(cmd))
        return "".join(parts)

    def transcript(self) -> str:
        return "\n".join(self.lines + ([self.partial_line] if self._line else []))
