import enum
import random
from collections.abc import Callable


class Outcome(str, enum.Enum):
    heads = "heads"
    tails = "tails"


class RandomOutcomeGenerator:
    """Fair coin backed by a uniform source in [0, 1)."""

    def __init__(
        self,
        source: Callable[[], float] = random.random,
        randint: Callable[[int, int], int] = random.randint,
    ) -> None:
        self._source = source
        self._randint = randint

    def next_outcome(self) -> Outcome:
        return Outcome.heads if self._source() < 0.5 else Outcome.tails

    def pick_batch_size(self, low: int, high: int) -> int:
        return self._randint(low, high)
