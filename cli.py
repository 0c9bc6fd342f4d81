# cli.py: command-line interface for the Intcode machine simulator
# Provides commands to run programs, search amplifier phases, solve the shipped
# puzzle days, (dis)assemble, play ASCII adventures and monitor interactively.

import argparse
import json
import shlex
import sys
from functools import partial
from pathlib import Path
from typing import List, Optional


# Local module imports
from intcode_sim.core.cpu import Machine, State
from intcode_sim.core.encoding import decode_ascii, encode_ascii, format_program, is_ascii, parse_program
from intcode_sim.core.errors import IntcodeError
from intcode_sim.core.observe import TraceSink
from intcode_sim.tools.amplifiers import FEEDBACK_PHASES, SERIAL_PHASES, best_phase_sequence
from intcode_sim.tools.anomaly_rules import rule_large_address, rule_long_run, rule_odd_jump_target
from intcode_sim.tools.assembler import MiniAssembler, disasm_one, disassemble
from intcode_sim.tools.droid import Droid
from intcode_sim.tools.inputs import PuzzleInputs
from intcode_sim.tools.solutions import solve


# -----------------------------------------------------------------------------
# Utilities
# -----------------------------------------------------------------------------

def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def load_program_arg(source: str, data_dir: Optional[str] = None) -> List[int]:
    """A program argument is either a file path or a day key such as 'day07' or '7'."""
    path = Path(source)
    if path.exists():
        return parse_program(read_text(path))
    return PuzzleInputs(data_dir).program(source)


def parse_int_list(text: Optional[str]) -> List[int]:
    if not text:
        return []
    return [int(t, 0) for t in text.replace(",", " ").split()]


# -----------------------------------------------------------------------------
# Command handlers
# -----------------------------------------------------------------------------

def cmd_run(args: argparse.Namespace) -> int:
    program = load_program_arg(args.program, args.data_dir)
    inputs = []
    for chunk in args.input or []:
        inputs.extend(parse_int_list(chunk))
    m = Machine(program, inputs=inputs, extended=args.extended, verbose=args.verbose)

    sink = None
    if args.trace_file:
        sink = TraceSink(path=args.trace_file)
        m.set_trace_sink(sink)
        print(f"Tracing to '{args.trace_file}'")
    m.add_anomaly_rule(rule_odd_jump_target)
    m.add_anomaly_rule(rule_large_address)
    m.add_anomaly_rule(partial(rule_long_run, state={}))

    steps = 0
    try:
        while m.state is State.RUNNING:
            if args.max_steps and steps >= args.max_steps:
                print(f"Stopped after {steps} steps at ip={m.ip}")
                break
            m.step()
            steps += 1
    finally:
        if sink:
            sink.close()
            print(f"Trace: {sink.events} events")

    outs = m.outputs.values
    if args.ascii:
        sys.stdout.write(decode_ascii(outs))
        rest = [v for v in outs if not is_ascii(v)]
        if rest:
            print(f"OUTPUT {format_program(rest)}")
    else:
        print(f"OUTPUT {format_program(outs)}")
    print(f"STATE {m.state.value} ip={m.ip} base={m.base} steps={steps}")

    if args.dump_memory:
        Path(args.dump_memory).write_text(format_program(m.memory.snapshot()) + "\n", encoding="utf-8")
        print(f"Memory dumped to '{args.dump_memory}'")

    if args.trace_metrics:
        Path(args.trace_metrics).write_text(json.dumps(m.metrics, indent=2), encoding="utf-8")
        print(f"Metrics saved to '{args.trace_metrics}'")
    return 0


def cmd_amplify(args: argparse.Namespace) -> int:
    program = load_program_arg(args.program, args.data_dir)
    if args.phases:
        phases = parse_int_list(args.phases)
    else:
        phases = list(FEEDBACK_PHASES if args.feedback else SERIAL_PHASES)
    thrust, seq = best_phase_sequence(program, phases, feedback=args.feedback, workers=args.workers)
    mode = "feedback" if args.feedback else "serial"
    print(f"MAX THRUST {thrust} ({mode}) phases={','.join(str(p) for p in seq)}")
    return 0


def cmd_solve(args: argparse.Namespace) -> int:
    inputs = PuzzleInputs(args.data_dir)
    parts = [args.part] if args.part else [1, 2]
    for part in parts:
        answer = solve(args.day, part, inputs, workers=args.workers)
        print(f"day{args.day:02d} part{part}: {answer}")
    return 0


def cmd_disasm(args: argparse.Namespace) -> int:
    program = load_program_arg(args.program, args.data_dir)
    for line in disassemble(program, start=args.start, count=args.count, extended=not args.basic):
        print(line)
    return 0


def cmd_assemble(args: argparse.Namespace) -> int:
    src = Path(args.source)
    out = Path(args.out)
    asm = MiniAssembler(read_text(src))
    items, program = asm.assemble()
    out.write_text(format_program(program) + "\n", encoding="utf-8")
    if args.listing:
        listing = [f"{it.addr:06d}: {it.kind:<5} {it.value}" for it in items]
        Path(args.listing).write_text("\n".join(listing), encoding="utf-8")
    print(f"Assembled '{src.name}' → '{out}' with {len(program)} words.")
    return 0


def cmd_adventure(args: argparse.Namespace) -> int:
    program = load_program_arg(args.program, args.data_dir)
    droid = Droid(program, verbose=args.verbose)
    sys.stdout.write(droid.boot())

    if args.script:
        for line in read_text(Path(args.script)).splitlines():
            if not line.strip() or droid.halted:
                continue
            print(f"> {line}")
            sys.stdout.write(droid.send(line))

    if not args.batch:
        while not droid.halted:
            try:
                line = input("> ")
            except EOFError:
                print()
                break
            if line.strip() in ("quit", "exit") and args.local_quit:
                break
            try:
                text = droid.send(line)
            except IntcodeError:
                raise
            except ValueError as e:
                print(f"Error: {e}")
                continue
            sys.stdout.write(text)

    if droid.values:
        print(f"VALUES {format_program(droid.values)}")
    print(f"STATE {droid.machine.state.value}")
    return 0


# -----------------------------------------------------------------------------
# Monitor (interactive)
# -----------------------------------------------------------------------------

class Monitor:
    """Interactive monitor: step/run, inspect memory and pointers, feed input."""

    def __init__(self, program: List[int], extended: bool, interactive: bool = True):
        self.program = list(program)
        self.extended = extended
        self.interactive = interactive
        self.machine = Machine(self.program, extended=extended, interactive=interactive)
        self.trace: bool = False

    def prompt(self):
        return f"intcode[{self.machine.state.value}]:{self.machine.ip:06d}> "

    def print_regs(self):
        m = self.machine
        print(f"ip={m.ip} base={m.base} state={m.state.value} pending_input={m.inputs.pending()}")

    def do_disasm(self, args: List[str]):
        addr = int(args[0], 0) if args else self.machine.ip
        count = int(args[1], 0) if len(args) > 1 else 8
        for line in disassemble(self.machine.memory.cells, start=addr, count=count, extended=self.extended):
            print(line)

    def do_read(self, args: List[str]):
        if len(args) < 1:
            print("read <addr> [count]")
            return
        addr = int(args[0], 0)
        count = int(args[1], 0) if len(args) > 1 else 8
        for i in range(count):
            print(f"{addr+i:06d}: {self.machine.memory.read(addr + i):+d}")

    def do_write(self, args: List[str]):
        if len(args) < 2:
            print("write <addr> <value>")
            return
        addr = int(args[0], 0)
        val = int(args[1], 0)
        self.machine.memory.write(addr, val)
        print(f"Wrote {val:+d} at {addr}")

    def do_input(self, args: List[str]):
        values = parse_int_list(" ".join(args))
        self.machine.add_inputs(values)
        print(f"Queued {len(values)} value(s)")

    def do_text(self, args: List[str]):
        self.machine.add_inputs(encode_ascii(" ".join(args)))
        print("Queued text line")

    def do_step(self, args: List[str]):
        n = int(args[0], 0) if args else 1
        for _ in range(n):
            if self.machine.halted:
                print("Machine halted.")
                break
            if self.trace:
                print(disasm_one(self.machine.memory.cells, self.machine.ip, self.extended)[0])
            out = self.machine.step()
            if out is not None:
                print(f"OUT {out}")
            if self.machine.waiting:
                print("Waiting for input. Use 'input' or 'text'.")
                break

    def do_run(self, args: List[str]):
        max_steps = int(args[0], 0) if args else 1000000
        steps = 0
        m = self.machine
        if m.waiting and len(m.inputs):
            m.state = State.RUNNING
        while m.state is State.RUNNING and steps < max_steps:
            out = m.step()
            if out is not None:
                print(f"OUT {out}")
            steps += 1
        print(f"Run finished after {steps} steps. ip={m.ip} state={m.state.value}")

    def do_outputs(self, args: List[str]):
        print(format_program(self.machine.outputs.values))

    def do_ascii(self, args: List[str]):
        sys.stdout.write(decode_ascii(self.machine.outputs.values) + "\n")

    def do_reset(self, args: List[str]):
        self.machine = Machine(self.program, extended=self.extended, interactive=self.interactive)
        print("Machine reset.")

    def do_trace(self, args: List[str]):
        self.trace = not self.trace
        print(f"Trace {'ON' if self.trace else 'OFF'}")

    def do_regs(self, args: List[str]):
        self.print_regs()

    def do_metrics(self, args: List[str]):
        print(json.dumps(self.machine.metrics, indent=2))

    def execute(self, line: str) -> bool:
        """Run one monitor command line. Returns False when the monitor should exit."""
        parts = shlex.split(line)
        if not parts:
            return True
        cmd, *args = parts
        if cmd in ("quit", "exit"):
            return False
        elif cmd == "help":
            print("""
Commands:
  step [n]                 Step n instructions.
  run [max_steps]          Run until HALT, input wait or max steps.
  input <v> [v ...]        Queue integer input values.
  text <words...>          Queue an ASCII line (newline appended).
  regs                     Show ip, relative base, state and pending input.
  disasm [addr] [count]    Disassemble from addr (default ip).
  read <addr> [count]      Dump memory words.
  write <addr> <value>     Write a memory word.
  outputs                  Show emitted values.
  ascii                    Show emitted values as ASCII text.
  metrics                  Show run metrics.
  trace                    Toggle per-step disassembly.
  reset                    Reload the program.
  help, exit, quit         Show help / exit.
            """)
        else:
            fn = getattr(self, f"do_{cmd}", None)
            if fn:
                try:
                    fn(args)
                except Exception as e:
                    print(f"Error: {e}")
            else:
                print(f"Unknown command: {cmd}. Type 'help'.")
        return True

    def loop(self):
        print("Interactive monitor. Type 'help' for commands. Ctrl-D to exit.")
        while True:
            try:
                line = input(self.prompt())
            except EOFError:
                print()
                break
            if not line.strip():
                continue
            if not self.execute(line):
                break


def cmd_monitor(args: argparse.Namespace) -> int:
    program = load_program_arg(args.program, args.data_dir)
    mon = Monitor(program, extended=args.extended)
    for chunk in args.input or []:
        mon.machine.add_inputs(parse_int_list(chunk))
    mon.loop()
    return 0


# -----------------------------------------------------------------------------
# Argument parsing
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Intcode machine simulator CLI / Monitor")
    p.add_argument("--data-dir", help="Directory holding dayNN.txt puzzle programs")
    sub = p.add_subparsers(dest="cmd", required=True)

    # run
    pr = sub.add_parser("run", help="Run a program to completion")
    pr.add_argument("program", help="Program file or day key (e.g. day09)")
    pr.add_argument("-i", "--input", action="append", help="Input values, comma or space separated (repeatable)")
    pr.add_argument("--extended", action="store_true", help="Enable relative mode, opcode 9 and growable memory")
    pr.add_argument("--ascii", action="store_true", help="Print ASCII outputs as text")
    pr.add_argument("--max-steps", type=int, default=0, help="Stop after this many instructions (0 = no limit)")
    pr.add_argument("--dump-memory", help="Write final memory to file")
    pr.add_argument("--trace-file", help="Write JSONL trace to file")
    pr.add_argument("--trace-metrics", help="Write metrics JSON to file")
    pr.add_argument("-v", "--verbose", action="store_true", help="Print each decoded instruction")

    # amplify
    pa = sub.add_parser("amplify", help="Search amplifier phase permutations for max thrust")
    pa.add_argument("program", help="Program file or day key")
    pa.add_argument("--phases", help="Phase settings (default 0-4 serial, 5-9 feedback)")
    pa.add_argument("--feedback", action="store_true", help="Use the feedback loop arrangement")
    pa.add_argument("--workers", type=int, default=0, help="Process pool size (0/1 = serial)")

    # solve
    ps = sub.add_parser("solve", help="Solve a shipped Intcode puzzle day")
    ps.add_argument("day", type=int, help="Day number (2, 7 or 9)")
    ps.add_argument("part", type=int, nargs="?", choices=(1, 2), help="Part (default both)")
    ps.add_argument("--workers", type=int, default=0, help="Process pool size for day 7")

    # disasm
    pd = sub.add_parser("disasm", help="Disassemble a program")
    pd.add_argument("program", help="Program file or day key")
    pd.add_argument("--start", type=int, default=0, help="Start address")
    pd.add_argument("--count", type=int, help="Number of lines")
    pd.add_argument("--basic", action="store_true", help="Treat relative mode / opcode 9 as data")

    # assemble
    pas = sub.add_parser("assemble", help="Assemble mnemonic source → comma-separated program")
    pas.add_argument("source", help="Assembly source file")
    pas.add_argument("-o", "--out", default="program.txt", help="Output program path")
    pas.add_argument("--listing", help="Emit listing to file")

    # adventure
    pv = sub.add_parser("adventure", help="Play an ASCII program interactively")
    pv.add_argument("program", help="Program file or day key")
    pv.add_argument("--script", help="File of commands to send first, one per line")
    pv.add_argument("--batch", action="store_true", help="Do not prompt after the script")
    pv.add_argument("--local-quit", action="store_true", help="Treat 'quit'/'exit' as local commands")
    pv.add_argument("-v", "--verbose", action="store_true", help="Print each decoded instruction")

    # monitor
    pm = sub.add_parser("monitor", help="Interactive monitor for stepping and inspecting")
    pm.add_argument("program", help="Program file or day key")
    pm.add_argument("-i", "--input", action="append", help="Initial input values")
    pm.add_argument("--extended", action="store_true", help="Enable relative mode, opcode 9 and growable memory")

    return p


# -----------------------------------------------------------------------------
# Main
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.cmd == "run":
        return cmd_run(args)
    elif args.cmd == "amplify":
        return cmd_amplify(args)
    elif args.cmd == "solve":
        return cmd_solve(args)
    elif args.cmd == "disasm":
        return cmd_disasm(args)
    elif args.cmd == "assemble":
        return cmd_assemble(args)
    elif args.cmd == "adventure":
        return cmd_adventure(args)
    elif args.cmd == "monitor":
        return cmd_monitor(args)
    else:
        parser.error("Unknown command")
        return 2


if __name__ == "__main__":
    sys.exit(main())
