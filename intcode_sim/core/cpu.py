# cpu.py: Intcode machine with addressing modes, queued input and suspend/resume
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

from .encoding import Mode, parse_program
from .errors import InvalidWriteModeError
from .observe import TraceSink, now_ts
from .opcodes import ARITY, Op, decode_op
from .tape import InputQueue, MemoryTape, OutputTape


class State(Enum):
    RUNNING = "running"
    WAITING_FOR_INPUT = "waiting_for_input"
    HALTED = "halted"


class Machine:
    """
    Intcode register machine: one memory tape, one instruction pointer.
    Supports:
      - Position and immediate addressing (relative addressing, opcode 9
        and growable memory when `extended` is set)
      - Queued input; an empty queue is fatal unless `interactive` is set,
        in which case the machine suspends in WAITING_FOR_INPUT
      - Output returned to the caller one value at a time
      - Optional JSON trace sink, metrics and anomaly rules
    """

    def __init__(
        self,
        program: Iterable[int],
        inputs: Optional[Iterable[int]] = None,
        extended: bool = False,
        interactive: bool = False,
        verbose: bool = False,
    ):
        self.extended = extended
        self.interactive = interactive
        self.verbose = verbose

        self.memory = MemoryTape(program, grow=extended)
        self.ip: int = 0
        self.base: int = 0
        self.inputs = InputQueue(inputs)
        self.outputs = OutputTape()
        self.state = State.RUNNING

        # Observability
        self.trace_sink = None          # type: Optional[TraceSink]
        self.metrics = {
            "instr_count": 0,
            "by_opcode": {},            # op_name -> count
            "inputs_consumed": 0,
            "outputs_emitted": 0,
            "jumps_taken": 0,
            "suspensions": 0,
            "max_address": 0,
            "anomalies": {},            # rule id -> count
        }
        self._anomaly_rules = []        # list of callables(event)->list[str]

    @classmethod
    def from_text(cls, text: str, **kwargs) -> "Machine":
        return cls(parse_program(text), **kwargs)

    def clone(self) -> "Machine":
        """Independent copy with the same memory, pointers, pending input and flags."""
        other = Machine(
            self.memory.snapshot(),
            inputs=self.inputs.pending(),
            extended=self.extended,
            interactive=self.interactive,
            verbose=self.verbose,
        )
        other.ip = self.ip
        other.base = self.base
        other.state = self.state
        return other

    # -----------------------------------------------------------------------
    # I/O
    # -----------------------------------------------------------------------
    def add_input(self, value: int):
        self.inputs.push(value)

    def add_inputs(self, values: Iterable[int]):
        self.inputs.extend(values)

    @property
    def halted(self) -> bool:
        return self.state is State.HALTED

    @property
    def waiting(self) -> bool:
        return self.state is State.WAITING_FOR_INPUT

    # -----------------------------------------------------------------------
    # Parameter resolution
    # -----------------------------------------------------------------------
    def _param_value(self, offset: int, mode: Mode) -> int:
        raw = self.memory.read(self.ip + offset)
        if mode == Mode.IMMEDIATE:
            return raw
        if mode == Mode.POSITION:
            return self.memory.read(raw)
        return self.memory.read(self.base + raw)

    def _param_addr(self, offset: int, mode: Mode) -> int:
        raw = self.memory.read(self.ip + offset)
        if mode == Mode.POSITION:
            return raw
        if mode == Mode.RELATIVE:
            return self.base + raw
        raise InvalidWriteModeError(f"Write parameter {offset} in immediate mode at ip={self.ip}")

    # -----------------------------------------------------------------------
    # Observability
    # -----------------------------------------------------------------------
    def set_trace_sink(self, sink):
        self.trace_sink = sink

    def add_anomaly_rule(self, rule_callable):
        """rule(event_dict) -> list[str] of triggered rule IDs"""
        self._anomaly_rules.append(rule_callable)

    def _emit_trace(self, ip, op, modes, params, output=None, consumed=None, jump_target=None, jumped=False):
        m = self.metrics
        m["instr_count"] += 1
        m["by_opcode"][op.name] = 1 + m["by_opcode"].get(op.name, 0)
        if self.memory.max_address > m["max_address"]:
            m["max_address"] = self.memory.max_address
        if output is not None:
            m["outputs_emitted"] += 1
        if consumed is not None:
            m["inputs_consumed"] += 1
        if jumped:
            m["jumps_taken"] += 1

        if not self.trace_sink and not self._anomaly_rules:
            return

        event = {
            "ts": now_ts(),
            "ip": ip,
            "op_code": int(op),
            "op_name": op.name,
            "modes": [int(md) for md in modes[:ARITY[op] - 1]],
            "params": list(params),
            "base": self.base,
            "state": self.state.value,
            "output": output,
            "input": consumed,
            "jumped": bool(jumped),
            "jump_target": jump_target,
            "anomalies": [],
        }

        for rule in self._anomaly_rules:
            event["anomalies"].extend(rule(event) or [])
        for a in event["anomalies"]:
            m["anomalies"][a] = 1 + m["anomalies"].get(a, 0)

        if self.trace_sink:
            self.trace_sink.emit(event)

    # -----------------------------------------------------------------------
    # Execute a single instruction at ip
    # -----------------------------------------------------------------------
    def step(self) -> Optional[int]:
        """Execute one instruction. Returns the emitted value for OUTPUT, else None."""
        if self.state is State.HALTED:
            return None

        ip = self.ip
        op, modes = decode_op(self.memory.read(ip), self.extended)
        if self.verbose:
            print(f"DEBUG: ip={ip} {op.name} modes={[int(md) for md in modes]} base={self.base}")

        if op in (Op.ADD, Op.MULTIPLY, Op.LESS_THAN, Op.EQUALS):
            a = self._param_value(1, modes[0])
            b = self._param_value(2, modes[1])
            if op is Op.ADD:
                res = a + b
            elif op is Op.MULTIPLY:
                res = a * b
            elif op is Op.LESS_THAN:
                res = 1 if a < b else 0
            else:
                res = 1 if a == b else 0
            addr = self._param_addr(3, modes[2])
            self.memory.write(addr, res)
            self.ip += ARITY[op]
            self.state = State.RUNNING
            self._emit_trace(ip, op, modes, (a, b, addr))
            return None

        elif op is Op.INPUT:
            addr = self._param_addr(1, modes[0])
            if self.interactive:
                v = self.inputs.read_next()
                if v is None:
                    # suspend; ip stays on the INPUT so resume retries it
                    self.metrics["suspensions"] += 1
                    self.state = State.WAITING_FOR_INPUT
                    if self.verbose:
                        print(f"DEBUG: waiting for input at ip={ip}")
                    return None
            else:
                v = self.inputs.read_required(ip)
            self.memory.write(addr, v)
            self.ip += ARITY[op]
            self.state = State.RUNNING
            self._emit_trace(ip, op, modes, (addr,), consumed=v)
            return None

        elif op is Op.OUTPUT:
            value = self._param_value(1, modes[0])
            # advance first so the caller resumes after this instruction
            self.ip += ARITY[op]
            self.state = State.RUNNING
            self.outputs.write(value)
            self._emit_trace(ip, op, modes, (value,), output=value)
            return value

        elif op in (Op.JUMP_IF_TRUE, Op.JUMP_IF_FALSE):
            cond = self._param_value(1, modes[0])
            target = self._param_value(2, modes[1])
            jumped = (cond != 0) if op is Op.JUMP_IF_TRUE else (cond == 0)
            if jumped:
                self.ip = target
            else:
                self.ip += ARITY[op]
            self.state = State.RUNNING
            self._emit_trace(ip, op, modes, (cond, target), jump_target=target, jumped=jumped)
            return None

        elif op is Op.ADJUST_BASE:
            shift = self._param_value(1, modes[0])
            self.base += shift
            self.ip += ARITY[op]
            self.state = State.RUNNING
            self._emit_trace(ip, op, modes, (shift,))
            return None

        # Op.STOP
        self.state = State.HALTED
        self._emit_trace(ip, op, modes, ())
        return None

    # -----------------------------------------------------------------------
    # Run loops
    # -----------------------------------------------------------------------
    def run_until_output(self) -> Optional[int]:
        """
        Run until OUTPUT (returns the value), STOP (returns None) or, for
        interactive machines, an INPUT with nothing queued (returns None).
        """
        if self.state is State.HALTED:
            return None
        self.state = State.RUNNING
        while self.state is State.RUNNING:
            out = self.step()
            if out is not None:
                return out
        return None

    def run_until_halted(self) -> List[int]:
        """Run to STOP (or suspension) and return every value emitted on the way."""
        start = self.outputs.record_count()
        if self.state is State.HALTED:
            return []
        self.state = State.RUNNING
        while self.state is State.RUNNING:
            self.step()
        return self.outputs.values[start:]

    def run_with_input(self, value: int) -> Optional[int]:
        """Queue one input, run to completion and return the last output (if any)."""
        self.add_input(value)
        outs = self.run_until_halted()
        return outs[-1] if outs else None

    def resume(self, new_input: Union[None, int, Iterable[int]] = None) -> Tuple[State, List[int]]:
        """
        Cooperative entry point for interactive machines: queue the optional
        input, run until the machine waits for more or halts, and return the
        state together with the values emitted since this call.
        """
        if new_input is not None:
            if isinstance(new_input, int):
                self.add_input(new_input)
            else:
                self.add_inputs(new_input)
        outs = self.run_until_halted()
        return self.state, outs
