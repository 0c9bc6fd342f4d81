# tools/anomaly_rules.py
def rule_odd_jump_target(event):
    # correct programs never jump to an odd address; flag it, don't stop the run
    if not event.get("jumped"):
        return []
    target = event.get("jump_target")
    return ["odd_jump_target"] if (target is not None and target % 2 == 1) else []

def rule_long_run(event, state, max_instr=1_000_000):
    # state is a dict you hold outside to accumulate
    state["instr"] = 1 + state.get("instr", 0)
    return ["long_run"] if state["instr"] == max_instr + 1 else []

def rule_large_address(event, limit=1 << 20):
    params = event.get("params") or []
    if event.get("op_name") in ("ADD", "MULTIPLY", "LESS_THAN", "EQUALS", "INPUT"):
        addr = params[-1] if params else None
        return ["large_address"] if (addr is not None and addr >= limit) else []
    return []

def rule_negative_output(event):
    v = event.get("output")
    return ["negative_output"] if (v is not None and v < 0) else []
