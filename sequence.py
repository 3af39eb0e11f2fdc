"""
Deterministic Sequence Generator

Park–Miller minimal-standard LCG: s <- s * 16807 mod (2^31 - 1),
emitting (s - 1) / (2^31 - 2) in [0, 1). Python ints are exact, so the
stream is identical to any other implementation that keeps the state below 2^31.

Every consumer gets its own instance. Nothing here is module-global, so
reseeding the factor signals can never shift the price history.
"""

from typing import Iterator, List

MULTIPLIER = 16807
MODULUS = 2147483647


class SeededSequence:
    """
    Lazy, restartable stream of floats in [0, 1).

    Simple interface:
        seq = SeededSequence(42)
        seq.next()      # one value
        seq.take(5)     # list of five values
        seq.restart()   # back to the first value
    """

    def __init__(self, seed: int):
        if int(seed) % MODULUS == 0:
            raise ValueError(f"Seed {seed} is a multiple of {MODULUS}; the stream would stick at zero")
        self.seed = int(seed)
        self._state = self.seed
        self.draws = 0

    def next(self) -> float:
        self._state = (self._state * MULTIPLIER) % MODULUS
        self.draws += 1
        return (self._state - 1) / (MODULUS - 1)

    __call__ = next

    def take(self, count: int) -> List[float]:
        return [self.next() for _ in range(count)]

    def restart(self) -> None:
        self._state = self.seed
        self.draws = 0

    def __iter__(self) -> Iterator[float]:
        while True:
            yield self.next()

    def __repr__(self) -> str:
        return f"SeededSequence(seed={self.seed}, draws={self.draws})"
