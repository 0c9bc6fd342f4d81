# run_amplifiers.py: wire five amplifiers serially and in a feedback loop, with tracing
import sys
import os as _os

# Allow running directly from repo root
sys.path.append(_os.path.abspath(_os.path.join(_os.path.dirname(__file__), '..', '..')))

from intcode_sim.core.cpu import Machine
from intcode_sim.core.observe import TraceSink
from intcode_sim.tools.amplifiers import AmplifierChain, best_phase_sequence
from intcode_sim.tools.anomaly_rules import rule_odd_jump_target

SERIAL_DEMO = [3, 15, 3, 16, 1002, 16, 10, 16, 1, 16, 15, 15, 4, 15, 99, 0, 0]
FEEDBACK_DEMO = [
    3, 26, 1001, 26, -4, 26, 3, 27, 1002, 27, 2, 27, 1, 27, 26, 27, 4, 27,
    1001, 28, -1, 28, 1005, 28, 6, 99, 0, 0, 5,
]


def main():
    # --- Single amplifier, traced in memory ---
    events = []
    amp = Machine(SERIAL_DEMO, inputs=[4, 0])
    amp.set_trace_sink(TraceSink(collector=events))
    amp.add_anomaly_rule(rule_odd_jump_target)
    print("single amplifier output:", amp.run_until_output())
    print("trace ops:", [ev["op_name"] for ev in events])

    # --- Fixed phase order ---
    chain = AmplifierChain(FEEDBACK_DEMO, [9, 8, 7, 6, 5])
    print("feedback thrust for 9,8,7,6,5:", chain.run_feedback(), "after", chain.passes, "passes")

    # --- Exhaustive search, fanned out over two worker processes ---
    print("serial best:", best_phase_sequence(SERIAL_DEMO, range(5), workers=2))
    print("feedback best:", best_phase_sequence(FEEDBACK_DEMO, range(5, 10), feedback=True, workers=2))


if __name__ == "__main__":
    main()
