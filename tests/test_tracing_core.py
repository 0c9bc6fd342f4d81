# tests/test_tracing_core.py
import json
from functools import partial
from tests.helpers_imports import mod

Machine = mod.cpu.Machine
TraceSink = mod.observe.TraceSink
rules = mod.anomaly_rules

# Reads a value, jumps to address 7 (odd) when it is non-zero, prints it, halts.
ODD_JUMP = [3, 11, 1005, 11, 7, 104, 0, 4, 11, 99, 0, 0]


def test_trace_events_and_metrics():
    buf = []
    m = Machine(ODD_JUMP, inputs=[-3])
    m.set_trace_sink(TraceSink(collector=buf))
    m.add_anomaly_rule(rules.rule_odd_jump_target)
    m.add_anomaly_rule(rules.rule_negative_output)
    assert m.run_until_halted() == [-3]

    assert [ev["op_name"] for ev in buf] == ["INPUT", "JUMP_IF_TRUE", "OUTPUT", "STOP"]
    inp, jump, out, stop = buf
    assert inp["input"] == -3 and inp["params"] == [11]
    assert jump["jumped"] is True and jump["jump_target"] == 7
    assert jump["modes"] == [0, 1]
    assert "odd_jump_target" in jump["anomalies"]
    assert out["output"] == -3 and "negative_output" in out["anomalies"]
    assert stop["state"] == "halted"
    for ev in buf:
        assert {"ts", "ip", "op_code", "base"} <= set(ev)

    metrics = m.metrics
    assert metrics["instr_count"] == 4
    assert metrics["by_opcode"] == {"INPUT": 1, "JUMP_IF_TRUE": 1, "OUTPUT": 1, "STOP": 1}
    assert metrics["inputs_consumed"] == 1
    assert metrics["outputs_emitted"] == 1
    assert metrics["jumps_taken"] == 1
    assert metrics["anomalies"] == {"odd_jump_target": 1, "negative_output": 1}


def test_odd_jump_is_only_flagged():
    m = Machine(ODD_JUMP, inputs=[5])
    m.add_anomaly_rule(rules.rule_odd_jump_target)
    assert m.run_until_halted() == [5]
    assert m.metrics["anomalies"] == {"odd_jump_target": 1}


def test_metrics_without_sink_or_rules():
    m = Machine(ODD_JUMP, inputs=[0])
    assert m.run_until_halted() == [0, 0]
    assert m.metrics["instr_count"] == 5
    assert m.metrics["jumps_taken"] == 0
    assert m.metrics["max_address"] == 11


def test_rule_helpers():
    assert rules.rule_odd_jump_target({"jumped": True, "jump_target": 8}) == []
    assert rules.rule_odd_jump_target({"jumped": False, "jump_target": 9}) == []
    assert rules.rule_large_address({"op_name": "ADD", "params": [1, 2, 1 << 21]}) == ["large_address"]
    assert rules.rule_large_address({"op_name": "OUTPUT", "params": [1 << 21]}) == []

    state = {}
    long_run = partial(rules.rule_long_run, state=state, max_instr=2)
    assert [long_run({}) for _ in range(4)] == [[], [], ["long_run"], []]


def test_trace_file_and_summary(tmp_path):
    trace_file = tmp_path / "trace.jsonl"
    with TraceSink(path=str(trace_file)) as sink:
        m = Machine([109, 3, 204, 0, 99], extended=True)
        m.set_trace_sink(sink)
        m.run_until_halted()

    lines = trace_file.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 3
    assert json.loads(lines[1])["base"] == 3

    s = mod.trace_analyse.summarize(str(trace_file))
    assert s["instructions"] == 3
    assert s["outputs"] == [0]
    assert s["max_base"] == 3
    assert s["anomalies"] == []
