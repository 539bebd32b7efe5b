# catalyst/utils/ids.py
import time
import uuid
from typing import Callable, Iterable


def new_node_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def now_ms() -> int:
    return int(time.time() * 1000)


def next_time_id(taken: Iterable, clock: Callable[[], int] = now_ms, fmt: Callable[[int], object] = lambda n: n):
    """Time-derived id, bumped by one millisecond until it is not in `taken`."""
    taken = set(taken)
    ms = clock()
    while fmt(ms) in taken:
        ms += 1
    return fmt(ms)
