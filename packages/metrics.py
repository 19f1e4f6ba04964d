import threading
import time
from collections import defaultdict
from contextlib import contextmanager


_lock = threading.Lock()
_counters: dict[str, int] = defaultdict(int)
_durations: dict[str, float] = defaultdict(float)


def inc(name: str, value: int = 1) -> None:
    with _lock:
        _counters[name] += value


def observe(name: str, seconds: float) -> None:
    with _lock:
        _durations[name] += seconds


@contextmanager
def timed(name: str):
    start = time.perf_counter()
    try:
        yield
    finally:
        observe(name, time.perf_counter() - start)


def snapshot() -> tuple[dict, dict]:
    with _lock:
        return dict(_counters), dict(_durations)


def render_text() -> str:
    counters, durations = snapshot()
    lines = [f"{name} {value}" for name, value in sorted(counters.items())]
    lines.extend(f"{name}_sum {value}" for name, value in sorted(durations.items()))
    return "\n".join(lines) + "\n"


def reset() -> None:
    with _lock:
        _counters.clear()
        _durations.clear()
