"""
Identity generation for framework nodes.

Ids are opaque strings, minted once when a node is created and never
reassigned. The engine receives its id source as an argument so tests
can swap the time-based default for a deterministic counter.

Format (default source):
    <kind>_<epoch millis>_<9 random base-36 chars>
    e.g. objective_1760781234567_k3j9x0a1q
"""

from __future__ import annotations

import itertools
import secrets
import string
import time
from typing import Callable, Optional


# A source maps a node kind ("objective", "outcome", ...) to a fresh id.
IdSource = Callable[[str], str]

_ALPHABET = string.digits + string.ascii_lowercase


class RandomIds:
    """
    Time seed plus random suffix.

    The millisecond part never goes backwards, so ids can only collide
    within one millisecond. Only that millisecond's ids are remembered.
    """

    def __init__(self, suffix_length: int = 9):
        self.suffix_length = suffix_length
        self._millis = 0
        self._issued: set[str] = set()

    def __call__(self, kind: str) -> str:
        while True:
            millis = max(int(time.time() * 1000), self._millis)
            if millis != self._millis:
                self._millis = millis
                self._issued.clear()
            suffix = "".join(
                secrets.choice(_ALPHABET) for _ in range(self.suffix_length)
            )
            candidate = f"{kind}_{millis}_{suffix}"
            if candidate not in self._issued:
                self._issued.add(candidate)
                return candidate


class CounterIds:
    """Deterministic monotonic ids: objective_1, outcome_2, ..."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)

    def __call__(self, kind: str) -> str:
        return f"{kind}_{next(self._counter)}"


_default_source: IdSource = RandomIds()


def new_id(kind: str = "node", ids: Optional[IdSource] = None) -> str:
    """Mint a unique id for a node of the given kind."""
    source = ids if ids is not None else _default_source
    return source(kind)
