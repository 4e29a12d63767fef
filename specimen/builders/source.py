"""Shared random source for the default builders.

One ``RandomSource`` is created per fixture. Every draw goes through its lock
so builders sharing it stay safe under concurrent top-level resolutions.
"""

from __future__ import annotations

import random
import threading
import uuid

from faker import Faker


class RandomSource:
    """Seedable ``random.Random`` + ``Faker`` pair guarded by one lock."""

    def __init__(self, seed: int | None = None, locale: str = "en_US"):
        self.seed = seed
        self.locale = locale
        self.rng = random.Random(seed)
        self.faker = Faker(locale)
        if seed is not None:
            # Ensure deterministic faker draws per fixture.
            self.faker.seed_instance(seed)
        self.lock = threading.RLock()

    def randint(self, low: int, high: int) -> int:
        with self.lock:
            return self.rng.randint(low, high)

    def uuid4(self) -> uuid.UUID:
        with self.lock:
            return uuid.UUID(int=self.rng.getrandbits(128), version=4)

    def randbytes(self, n: int) -> bytes:
        with self.lock:
            return self.rng.randbytes(n)

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed!r}, locale={self.locale!r})"
