"""Random source adapters.

SeededRandomAdapter is the production source; SequenceRandomAdapter replays
a fixed list of draws so sampling can be tested deterministically.

Example:
    >>> from cimatrix.adapters import SeededRandomAdapter, SequenceRandomAdapter
    >>> rng = SeededRandomAdapter(seed=42)
    >>> rng.random()
    >>> fake = SequenceRandomAdapter([0.0, 0.5, 0.99])
    >>> fake.random()  # 0.0
"""

from __future__ import annotations

import random
from collections.abc import Sequence

from cimatrix.ports.random import RandomPort


class SeededRandomAdapter(RandomPort):
    """RandomPort backed by random.Random.

    Attributes:
        seed: Seed the generator was created with. None means the
            generator is seeded from system entropy.
    """

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()

    def __repr__(self) -> str:
        return f"SeededRandomAdapter(seed={self.seed!r})"


class SequenceRandomAdapter(RandomPort):
    """RandomPort that replays a fixed sequence of draws, cycling at the end.

    Args:
        draws: Values in [0, 1) returned in order.
    """

    def __init__(self, draws: Sequence[float]) -> None:
        if not draws:
            raise ValueError("SequenceRandomAdapter needs at least one draw")
        for draw in draws:
            if not 0.0 <= draw < 1.0:
                raise ValueError(f"Draw {draw!r} is outside [0, 1)")
        self._draws = list(draws)
        self._position = 0
        self.calls = 0

    def random(self) -> float:
        value = self._draws[self._position]
        self._position = (self._position + 1) % len(self._draws)
        self.calls += 1
        return value

    def reset(self) -> None:
        """Rewind to the first draw."""
        self._position = 0
        self.calls = 0
