"""Chronologically sortable push ids.

Ids are 20 characters: 8 encode the millisecond timestamp in a 64-symbol
alphabet whose ASCII order matches its numeric order, 12 are random.  Ids
generated within the same millisecond increment the random tail so they
still sort in creation order.
"""

from __future__ import annotations

import secrets
import threading

from geotrail._constants import PUSH_CHARS, PUSH_RANDOM_CHARS, PUSH_TIME_CHARS
from geotrail.models import now_ms


class PushIdGenerator:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_ms = -1
        self._last_random: list[int] = [0] * PUSH_RANDOM_CHARS

    def __call__(self, timestamp_ms: int | None = None) -> str:
        ts = now_ms() if timestamp_ms is None else timestamp_ms
        with self._lock:
            if ts == self._last_ms:
                # Same millisecond: increment the random tail, carrying left.
                i = PUSH_RANDOM_CHARS - 1
                while i >= 0 and self._last_random[i] == len(PUSH_CHARS) - 1:
                    self._last_random[i] = 0
                    i -= 1
                if i >= 0:
                    self._last_random[i] += 1
            else:
                self._last_ms = ts
                self._last_random = [secrets.randbelow(len(PUSH_CHARS)) for _ in range(PUSH_RANDOM_CHARS)]
            random_part = "".join(PUSH_CHARS[n] for n in self._last_random)

        time_chars: list[str] = []
        for _ in range(PUSH_TIME_CHARS):
            time_chars.append(PUSH_CHARS[ts % 64])
            ts //= 64
        return "".join(reversed(time_chars)) + random_part


generate_push_id = PushIdGenerator()
