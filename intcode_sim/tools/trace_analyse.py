# intcode_sim/tools/trace_analyse.py
import json
import sys
from collections import Counter


def summarize(path: str) -> dict:
    ops = Counter()
    anomalies = Counter()
    jump_targets = Counter()
    outputs = []
    inputs = 0
    max_base = 0

    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            ev = json.loads(line)
            ops[ev.get("op_name", "?")] += 1
            if ev.get("jumped"):
                jump_targets[ev.get("jump_target")] += 1
            if ev.get("output") is not None:
                outputs.append(ev["output"])
            if ev.get("input") is not None:
                inputs += 1
            max_base = max(max_base, ev.get("base", 0) or 0)
            for a in ev.get("anomalies", []) or []:
                anomalies[a] += 1

    return {
        "instructions": sum(ops.values()),
        "top_opcodes": ops.most_common(10),
        "jumps_taken": sum(jump_targets.values()),
        "hot_jump_targets": jump_targets.most_common(5),
        "inputs": inputs,
        "outputs": outputs,
        "max_base": max_base,
        "anomalies": anomalies.most_common(),
    }


def analyze(path: str):
    s = summarize(path)
    print("Instructions:", s["instructions"])
    print("Top opcodes:", s["top_opcodes"])
    print("Jumps taken:", s["jumps_taken"], "hot targets:", s["hot_jump_targets"])
    print("Inputs consumed:", s["inputs"])
    print("Outputs:", s["outputs"][:20], "..." if len(s["outputs"]) > 20 else "")
    print("Max relative base:", s["max_base"])
    print("Anomalies:", s["anomalies"])


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python -m intcode_sim.tools.trace_analyse <trace.jsonl>")
        sys.exit(2)
    analyze(sys.argv[1])
