# assembler.py: MiniAssembler (two-pass) for Intcode, and a linear-sweep disassembler
from typing import List, Optional, Sequence, Tuple

from ..core.encoding import Mode
from ..core.errors import IntcodeError
from ..core.opcodes import ARITY, OP, Op, decode_op, encode_instr

MNEMONICS = {
    "add": "ADD",
    "mul": "MULTIPLY",
    "in":  "INPUT",
    "out": "OUTPUT",
    "jt":  "JUMP_IF_TRUE",
    "jf":  "JUMP_IF_FALSE",
    "lt":  "LESS_THAN",
    "eq":  "EQUALS",
    "arb": "ADJUST_BASE",
    "hlt": "STOP",
}
SHORT = {v: k for k, v in MNEMONICS.items()}

# Which parameter (0-based) of each op is a write target
WRITE_PARAM = {
    Op.ADD: 2, Op.MULTIPLY: 2, Op.LESS_THAN: 2, Op.EQUALS: 2, Op.INPUT: 0,
}

MODE_PREFIX = {"#": Mode.IMMEDIATE, "~": Mode.RELATIVE}


class AsmItem:
    def __init__(self, addr: int, value: int, kind: str):
        self.addr  = addr
        self.value = value
        self.kind  = kind  # 'instr', 'param' or 'data'

    def __repr__(self):
        return f"AsmItem(addr={self.addr}, kind={self.kind}, value={self.value})"


class MiniAssembler:
    """
    Source syntax, one statement per line:
      label:           (may prefix a statement: "n: data 3")
      add a b c        operands: 12 position, #12 immediate, ~12 relative,
                       or a label name (its address) with the same prefixes
      data 1 -2 3      raw words
      .org N           pad with zeros up to address N
    Comments start with ';' or a '#' followed by whitespace.
    """

    def __init__(self, text: str):
        self.text = text
        self.labels = {}
        self.items: List[AsmItem] = []
        self.loc = 0
        self.pending_labels: List[Tuple[str, int, int]] = []   # (label, item index, lineno)

    # ---------- helpers ----------
    def _strip_inline_comments(self, line: str) -> str:
        if not line:
            return line
        p = line.find(';')
        if p != -1:
            line = line[:p]
        # '#' doubles as the immediate prefix, so only a bare '#' opens a comment
        for i, ch in enumerate(line):
            if ch == '#' and (i + 1 == len(line) or line[i + 1].isspace()):
                return line[:i]
        return line

    def _parse_int(self, tok: str) -> int:
        tok = tok.strip()
        if tok.lower().lstrip("-").startswith("0x"):
            return int(tok, 16)
        return int(tok)

    def _add_item(self, value: int, kind: str) -> int:
        self.items.append(AsmItem(self.loc, value, kind))
        self.loc += 1
        return len(self.items) - 1

    def _parse_operand(self, tok: str, lineno: int) -> Tuple[Mode, Optional[int], Optional[str]]:
        mode = MODE_PREFIX.get(tok[0], Mode.POSITION)
        body = tok[1:] if tok[0] in MODE_PREFIX else tok
        if not body:
            raise ValueError(f"[line {lineno}] Empty operand")
        try:
            return mode, self._parse_int(body), None
        except ValueError:
            return mode, None, body

    # ---------- pass 1 ----------
    def pass1(self):
        for lineno, raw in enumerate(self.text.splitlines(), start=1):
            line = self._strip_inline_comments(raw).strip()
            if not line:
                continue

            # label:, optionally followed by a statement on the same line
            if ":" in line:
                label, _, line = line.partition(":")
                label = label.strip()
                if not label or " " in label:
                    raise ValueError(f"[line {lineno}] Bad label name: {label!r}")
                if label in self.labels:
                    raise ValueError(f"[line {lineno}] Duplicate label: {label}")
                self.labels[label] = self.loc
                line = line.strip()
                if not line:
                    continue

            toks = line.replace(",", " ").split()

            # directives
            if toks[0] == ".org" and len(toks) >= 2:
                target = self._parse_int(toks[1])
                if target < self.loc:
                    raise ValueError(f"[line {lineno}] .org {target} would move backwards from {self.loc}")
                while self.loc < target:
                    self._add_item(0, "data")
                continue

            if toks[0] == "data":
                for t in toks[1:]:
                    try:
                        self._add_item(self._parse_int(t), "data")
                    except ValueError:
                        idx = self._add_item(0, "data")
                        self.pending_labels.append((t, idx, lineno))
                continue

            # instructions
            mnem = toks[0].lower()
            op_name = MNEMONICS.get(mnem, mnem.upper())
            if op_name not in OP:
                raise ValueError(f"[line {lineno}] Unknown mnemonic: {toks[0]}")
            op = OP[op_name]
            n_params = ARITY[op] - 1
            operands = toks[1:]
            if len(operands) != n_params:
                raise ValueError(f"[line {lineno}] {mnem} expects {n_params} operand(s), got {len(operands)}")

            parsed = [self._parse_operand(t, lineno) for t in operands]
            modes = [p[0] for p in parsed]
            wp = WRITE_PARAM.get(op)
            if wp is not None and modes[wp] == Mode.IMMEDIATE:
                raise ValueError(f"[line {lineno}] {mnem}: write operand cannot be immediate")

            self._add_item(encode_instr(op_name, modes), "instr")
            for mode, value, label in parsed:
                idx = self._add_item(0 if value is None else value, "param")
                if label is not None:
                    self.pending_labels.append((label, idx, lineno))

    # ---------- pass 2 ----------
    def pass2(self):
        for (lab, idx, lineno) in self.pending_labels:
            if lab not in self.labels:
                raise ValueError(f"[line {lineno}] Unknown label operand: {lab}")
            self.items[idx].value = self.labels[lab]

    def assemble(self) -> Tuple[List[AsmItem], List[int]]:
        self.pass1()
        self.pass2()
        return self.items, [it.value for it in self.items]


def assemble(text: str) -> List[int]:
    return MiniAssembler(text).assemble()[1]


# -----------------------------------------------------------------------------
# Disassembly
# -----------------------------------------------------------------------------

def _fmt_param(value: int, mode: Mode) -> str:
    if mode == Mode.IMMEDIATE:
        return f"#{value}"
    if mode == Mode.RELATIVE:
        return f"~{value}"
    return str(value)


def disasm_one(program: Sequence[int], ip: int, extended: bool = True) -> Tuple[str, int]:
    """Return (text, size) for the instruction at ip; undecodable words render as data."""
    if ip < 0 or ip >= len(program):
        return f"{ip:06d}: <EOF>", 1
    word = program[ip]
    try:
        op, modes = decode_op(word, extended)
    except IntcodeError:
        return f"{ip:06d}: data {word}", 1
    size = ARITY[op]
    if ip + size > len(program):
        return f"{ip:06d}: data {word}", 1
    params = [_fmt_param(program[ip + 1 + i], modes[i]) for i in range(size - 1)]
    return f"{ip:06d}: {SHORT[op.name]:<4} {' '.join(params)}".rstrip(), size


def disassemble(program: Sequence[int], start: int = 0, count: Optional[int] = None, extended: bool = True) -> List[str]:
    lines = []
    ip = start
    while ip < len(program) and (count is None or len(lines) < count):
        text, size = disasm_one(program, ip, extended)
        lines.append(text)
        ip += size
    return lines
