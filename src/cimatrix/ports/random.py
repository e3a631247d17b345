from __future__ import annotations

from abc import ABC, abstractmethod


class RandomPort(ABC):
    """Source of uniform random draws used by the matrix engine.

    The engine never touches global randomness; every draw goes through a
    RandomPort so a build can be reproduced from a seed or scripted in tests.
    """

    @abstractmethod
    def random(self) -> float:
        """Return the next uniform draw in the half-open range [0, 1)."""
        ...

    def choice_index(self, size: int) -> int:
        """Pick a uniformly distributed index in range(size)."""
        if size <= 0:
            raise ValueError("Cannot choose from an empty sequence")
        return min(int(self.random() * size), size - 1)
