# pydummy/random_source.py
from __future__ import annotations

from datetime import date, time
from typing import Optional
import logging
import random
import string
import uuid

from .typing_defs import RandomSourceLike

_log = logging.getLogger("pydummy.random_source")

ALPHABET = string.ascii_uppercase + string.digits
STRING_LENGTH = 12
DATE_EPOCH = date(1995, 1, 1)
SECONDS_PER_DAY = 24 * 60 * 60


class RandomValueSource:
    """
    The one source of randomness behind every synthesized value.

    Wraps a private ``random.Random`` so that seeding is explicit: two sources
    built with the same seed produce the same stream, and a source built with
    ``seed=None`` draws its seed from the OS once, at construction time.
    Keep a single long-lived instance per process (see ``get_default_source``).

    Not thread-safe: callers sharing a source across threads must serialize
    access themselves.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def __repr__(self) -> str:
        return f"RandomValueSource(seed={self.seed!r})"

    def reseed(self, seed: Optional[int]) -> None:
        self.seed = seed
        self._rng.seed(seed)

    # ---- primitives (RandomSourceLike) ----

    def next_int(self, bound: int) -> int:
        if bound <= 0:
            raise ValueError(f"bound must be positive, got {bound}")
        return self._rng.randrange(bound)

    def next_float(self) -> float:
        return self._rng.random()

    def next_bool(self) -> bool:
        return self._rng.getrandbits(1) == 1

    # ---- derived helpers ----

    def next_string(self, length: int = STRING_LENGTH) -> str:
        return random_string(self, length)

    def next_date(self, today: Optional[date] = None) -> date:
        return random_date(self, today)

    def next_time(self) -> time:
        return random_time(self)

    def next_uuid(self) -> uuid.UUID:
        return random_uuid(self)


# ------------------------- helpers over any source -------------------------

def random_string(source: RandomSourceLike, length: int = STRING_LENGTH) -> str:
    """Fixed-length string drawn uniformly from ``A-Z0-9``."""
    return "".join(ALPHABET[source.next_int(len(ALPHABET))] for _ in range(length))


def random_date(source: RandomSourceLike, today: Optional[date] = None) -> date:
    """
    Uniform date in ``[DATE_EPOCH, today]``, both ends included.
    """
    end = today or date.today()
    span = (end - DATE_EPOCH).days
    if span < 0:
        return DATE_EPOCH
    return date.fromordinal(DATE_EPOCH.toordinal() + source.next_int(span + 1))


def random_time(source: RandomSourceLike) -> time:
    """Uniform time of day with whole-second resolution."""
    hours, rest = divmod(source.next_int(SECONDS_PER_DAY), 3600)
    return time(hours, *divmod(rest, 60))


def random_uuid(source: RandomSourceLike) -> uuid.UUID:
    """Version-4 UUID whose bits come from ``source`` (reproducible under a seed)."""
    return uuid.UUID(int=source.next_int(1 << 128), version=4)


# ----------------------------- shared instance -----------------------------

_DEFAULT_SOURCE: Optional[RandomValueSource] = None


def get_default_source() -> RandomValueSource:
    """Return the process-wide source, creating it (OS-seeded) on first use."""
    global _DEFAULT_SOURCE
    if _DEFAULT_SOURCE is None:
        _DEFAULT_SOURCE = RandomValueSource()
    return _DEFAULT_SOURCE


def set_default_source(source: RandomValueSource) -> RandomValueSource:
    """Install ``source`` as the process-wide source and return the previous one."""
    global _DEFAULT_SOURCE
    previous = get_default_source()
    _DEFAULT_SOURCE = source
    return previous


def reseed(seed: Optional[int]) -> RandomValueSource:
    """Re-seed the process-wide source in place (all holders see the new stream)."""
    source = get_default_source()
    source.reseed(seed)
    _log.debug("default random source reseeded with %r", seed)
    return source
