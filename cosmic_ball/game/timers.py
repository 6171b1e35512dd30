# cosmic_ball/game/timers.py
from __future__ import annotations
import itertools
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass
class _Timer:
    key: str
    deadline: float
    callback: Callable[[], None]
    generation: int
    seq: int


class DeferredTimers:
    """
    Wall-clock deferred callbacks, polled between simulation ticks.
    - Keyed: scheduling under an existing key updates that timer instead of
      adding a second one (stack / latest-expiry-wins / replace / once).
    - Every timer is stamped with the current generation; invalidate() bumps
      it so anything scheduled before a restart never fires.
    """
    def __init__(self, clock: Optional[Clock] = None):
        self.clock: Clock = clock or monotonic_ms
        self.generation = 0
        self._timers: Dict[str, _Timer] = {}
        self._seq = itertools.count()

    def now(self) -> float:
        return float(self.clock())

    def _put(self, key: str, deadline: float, callback: Callable[[], None]) -> float:
        self._timers[key] = _Timer(key, deadline, callback, self.generation, next(self._seq))
        return deadline

    def schedule(self, key: str, delay_ms: float, callback: Callable[[], None]) -> float:
        """Replace any pending timer under key. Returns the deadline."""
        return self._put(key, self.now() + max(0.0, delay_ms), callback)

    def schedule_once(self, key: str, delay_ms: float, callback: Callable[[], None]) -> float:
        """Schedule only if nothing is pending under key."""
        pending = self._timers.get(key)
        if pending is not None:
            return pending.deadline
        return self.schedule(key, delay_ms, callback)

    def extend(self, key: str, delay_ms: float, callback: Callable[[], None]) -> float:
        """Stack: a pending timer is pushed out by delay_ms, else starts fresh."""
        delay_ms = max(0.0, delay_ms)
        pending = self._timers.get(key)
        start = max(pending.deadline, self.now()) if pending is not None else self.now()
        return self._put(key, start + delay_ms, callback)

    def push_back(self, key: str, delay_ms: float, callback: Callable[[], None]) -> float:
        """Latest expiry wins: deadline = max(pending, now + delay_ms)."""
        deadline = self.now() + max(0.0, delay_ms)
        pending = self._timers.get(key)
        if pending is not None:
            deadline = max(deadline, pending.deadline)
        return self._put(key, deadline, callback)

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> str:
        """Anonymous fire-and-forget timer. Returns its generated key."""
        key = f"_anon{next(self._seq)}"
        self.schedule(key, delay_ms, callback)
        return key

    def cancel(self, key: str) -> bool:
        return self._timers.pop(key, None) is not None

    def is_pending(self, key: str) -> bool:
        return key in self._timers

    def remaining(self, key: str) -> float:
        t = self._timers.get(key)
        if t is None:
            return 0.0
        return max(0.0, t.deadline - self.now())

    def invalidate(self) -> int:
        """Drop everything and start a new generation."""
        self.generation += 1
        dropped = len(self._timers)
        self._timers.clear()
        if dropped:
            logger.debug("dropped %d pending timers (generation %d)", dropped, self.generation)
        return self.generation

    def poll(self, now: Optional[float] = None) -> int:
        """Fire every due timer in deadline order. Returns how many fired."""
        now = self.now() if now is None else now
        due = sorted(
            (t for t in self._timers.values() if t.deadline <= now),
            key=lambda t: (t.deadline, t.seq)
        )
        fired = 0
        for t in due:
            # a callback fired earlier in this poll may have rescheduled or cancelled it
            if self._timers.get(t.key) is not t:
                continue
            del self._timers[t.key]
            if t.generation != self.generation:
                continue
            t.callback()
            fired += 1
        return fired

    def __len__(self) -> int:
        return len(self._timers)
