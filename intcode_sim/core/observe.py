# observe.py: trace sink for per-instruction machine events
import json, time
from typing import Optional, Dict, Any


class TraceSink:
    """Appends one event per executed instruction, as JSON lines to `path` or to a list-like collector."""
    def __init__(self, path: Optional[str] = None, collector: Optional[list] = None):
        self.path = path
        self.collector = collector
        self.events = 0
        self._fh = None

    def emit(self, event: Dict[str, Any]):
        self.events += 1
        if self.path:
            # opened lazily, released by close()
            if self._fh is None:
                self._fh = open(self.path, "a", encoding="utf-8")
            self._fh.write(json.dumps(event, separators=(",", ":")) + "\n")
        elif self.collector is not None:
            self.collector.append(event)

    def close(self):
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def now_ts() -> float:
    return time.time()
