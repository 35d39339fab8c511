"""
In-process counters and timing windows, exposed via GET /metrics.

Names are dotted: extractor.fenced, llm.openai.duration_ms, errors.parse_failure.
Values live in this process only and reset on restart.
"""
import time
from collections import Counter, deque
from contextlib import contextmanager
from typing import Any, Deque, Dict, Iterator

WINDOW = 500  # most recent samples kept per timing

_counters: Counter = Counter()
_timings: Dict[str, Deque[float]] = {}


def inc(name: str, value: int = 1) -> None:
    _counters[name] += value


def observe(name: str, value: float) -> None:
    """Record one sample (milliseconds, by convention)"""
    _timings.setdefault(name, deque(maxlen=WINDOW)).append(value)


@contextmanager
def timer(name: str) -> Iterator[None]:
    started = time.monotonic()
    try:
        yield
    finally:
        observe(name, (time.monotonic() - started) * 1000)


def _percentile(ordered, fraction: float) -> float:
    return ordered[min(int(len(ordered) * fraction), len(ordered) - 1)]


def get_snapshot() -> Dict[str, Any]:
    histograms = {}
    for name, samples in _timings.items():
        if not samples:
            continue
        ordered = sorted(samples)
        histograms[name] = {
            "count": len(ordered),
            "mean": round(sum(ordered) / len(ordered), 1),
            "p50": round(_percentile(ordered, 0.5), 1),
            "p95": round(_percentile(ordered, 0.95), 1),
            "max": round(ordered[-1], 1),
        }
    return {"counters": dict(_counters), "histograms": histograms}


def reset() -> None:
    _counters.clear()
    _timings.clear()
