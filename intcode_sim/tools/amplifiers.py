# amplifiers.py: serial and feedback amplifier chains, exhaustive phase search
from concurrent.futures import ProcessPoolExecutor
from itertools import permutations
from typing import List, Optional, Sequence, Tuple

from ..core.cpu import Machine

SERIAL_PHASES = (0, 1, 2, 3, 4)
FEEDBACK_PHASES = (5, 6, 7, 8, 9)


class AmplifierChain:
    """
    N machines cloned from one program, each seeded with its phase setting.
    Each machine's output becomes the next machine's input; in feedback mode
    the last machine feeds the first until one of them halts.
    """

    def __init__(self, program: Sequence[int], phases: Sequence[int], extended: bool = False):
        self.phases = tuple(phases)
        self.amplifiers: List[Machine] = [Machine(program, extended=extended) for _ in self.phases]
        self.signal = 0
        self.passes = 0

    def _prime(self):
        for amp, phase in zip(self.amplifiers, self.phases):
            amp.add_inputs([phase, self.signal])
            out = amp.run_until_output()
            if out is not None:
                self.signal = out
        self.passes = 1

    def run_serial(self, signal: int = 0) -> int:
        self.signal = signal
        self._prime()
        return self.signal

    def run_feedback(self, signal: int = 0) -> int:
        self.signal = signal
        self._prime()
        while True:
            for amp in self.amplifiers:
                amp.add_input(self.signal)
                out = amp.run_until_output()
                if out is None:
                    return self.signal
                self.signal = out
            self.passes += 1


def calc_thrust(program: Sequence[int], phases: Sequence[int], feedback: bool = False, extended: bool = False) -> int:
    chain = AmplifierChain(program, phases, extended=extended)
    return chain.run_feedback() if feedback else chain.run_serial()


def _thrust_job(job: Tuple[Tuple[int, ...], Tuple[int, ...], bool, bool]) -> Tuple[int, Tuple[int, ...]]:
    program, phases, feedback, extended = job
    return calc_thrust(program, phases, feedback=feedback, extended=extended), phases


def best_phase_sequence(
    program: Sequence[int],
    phases: Sequence[int],
    feedback: bool = False,
    workers: Optional[int] = None,
    extended: bool = False,
) -> Tuple[int, Tuple[int, ...]]:
    """
    Evaluate every permutation of `phases` and return (max thrust, phase order).
    With workers > 1 the permutations are spread over a process pool; each
    candidate is independent, so no ordering is needed.
    """
    phases = tuple(phases)
    if not phases:
        raise ValueError("No phase settings given")
    prg = tuple(program)
    jobs = [(prg, seq, feedback, extended) for seq in permutations(phases)]
    if workers and workers > 1:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(_thrust_job, jobs, chunksize=max(1, len(jobs) // (workers * 4))))
    else:
        results = [_thrust_job(j) for j in jobs]
    return max(results, key=lambda r: r[0])


def max_thrust_serial(program: Sequence[int], phases: Sequence[int] = SERIAL_PHASES, workers: Optional[int] = None) -> int:
    return best_phase_sequence(program, phases, feedback=False, workers=workers)[0]


def max_thrust_feedback(program: Sequence[int], phases: Sequence[int] = FEEDBACK_PHASES, workers: Optional[int] = None) -> int:
    return best_phase_sequence(program, phases, feedback=True, workers=workers)[0]
