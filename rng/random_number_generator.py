# rng/random_number_generator.py

import random
from typing import Sequence, Tuple, TypeVar

T = TypeVar('T')

# Seeds chosen on the user's behalf are drawn from this range
MAX_SEED = 2**32 - 1


class RandomNumberGenerator:
    """Seeded RNG shared by every random choice made during a shuffle.

    Wraps random.Random so that a door shuffle is fully determined by its
    seed and the input tables. Nothing in the randomizer should touch the
    global random module; pass one of these around instead and consume it in
    a fixed order.

    Usage:
        rng = RandomNumberGenerator(12345)
        room = rng.choice(selectable_rooms)
    """

    def __init__(self, seed: int):
        """Initialize RNG with a seed.

        Args:
            seed: Integer seed for deterministic random generation
        """
        self._seed = seed
        self._rng = random.Random(seed)
        self._initial_state = self._rng.getstate()

    @classmethod
    def WithRandomSeed(cls) -> "RandomNumberGenerator":
        """Create an RNG with a freshly drawn seed (see the seed property)."""
        return cls(random.SystemRandom().randint(0, MAX_SEED))

    @property
    def seed(self) -> int:
        """Get the seed used to initialize this RNG."""
        return self._seed

    def reset(self) -> None:
        """Reset RNG to initial seeded state."""
        self._rng.setstate(self._initial_state)

    def getstate(self) -> Tuple:
        return self._rng.getstate()

    def setstate(self, state: Tuple) -> None:
        self._rng.setstate(state)

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence.

        Raises:
            IndexError: If seq is empty
        """
        return self._rng.choice(seq)
