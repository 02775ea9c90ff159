"""Coin flipping and the counters it maintains."""
from __future__ import annotations

import logging
import re

from coin_api.core.metrics import MetricsRegistry
from coin_api.schemas.flip import CurrentCounts, FlipResult, FlipStats, RandomFlipResult
from coin_api.services.coin import Outcome, RandomOutcomeGenerator

HEADS_COUNT = "heads_count"
TAILS_COUNT = "tails_count"
FLIP_COUNT = "flip_count"
ERROR_COUNTER = "error_counter"

INVALID_TIMES_MESSAGE = "Please provide a valid number of times greater than zero."

LEADING_INTEGER = re.compile(r"[ \t\n\r\f\v]*([+-]?[0-9]+)")

logger = logging.getLogger(__name__)


class InvalidArgumentError(ValueError):
    def __init__(self, message: str = INVALID_TIMES_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


def register_flip_metrics(registry: MetricsRegistry) -> None:
    registry.register_counter(HEADS_COUNT, "Number of heads")
    registry.register_counter(TAILS_COUNT, "Number of tails")
    registry.register_counter(FLIP_COUNT, "Number of flips")
    registry.register_counter(ERROR_COUNTER, "Total number of errors")


def parse_times(raw: str | None) -> int:
    """Read the leading ASCII integer of ``raw``, ignoring whatever follows it.

    ``"2.5"`` and ``"10abc"`` give 2 and 10; ``"1_000"`` gives 1. Non-ASCII
    digits do not count as digits.
    """
    match = LEADING_INTEGER.match(raw or "")
    if match is None:
        raise InvalidArgumentError()
    times = int(match.group(1))
    if times <= 0:
        raise InvalidArgumentError()
    return times


def format_percentage(part: int, total: int) -> str:
    if total == 0:
        return "0.00%"
    return f"{part / total * 100:.2f}%"


class FlipService:
    def __init__(
        self,
        registry: MetricsRegistry,
        generator: RandomOutcomeGenerator | None = None,
        random_min: int = 1,
        random_max: int = 100,
        max_times: int = 1_000_000,
    ) -> None:
        self.registry = registry
        self.generator = generator or RandomOutcomeGenerator()
        self.random_min = random_min
        self.random_max = random_max
        self.max_times = max_times

    def flip(self, times: int) -> FlipResult:
        if isinstance(times, bool) or not isinstance(times, int) or times <= 0:
            raise InvalidArgumentError()
        if times > self.max_times:
            raise InvalidArgumentError(
                f"Please provide a number of times no greater than {self.max_times}."
            )
        heads = 0
        tails = 0
        for _ in range(times):
            if self.generator.next_outcome() is Outcome.heads:
                heads += 1
            else:
                tails += 1
        self.registry.increment_counters(
            {FLIP_COUNT: times, HEADS_COUNT: heads, TAILS_COUNT: tails}
        )
        return FlipResult(heads=heads, tails=tails)

    def flip_random_batch(self) -> RandomFlipResult:
        times = self.generator.pick_batch_size(self.random_min, self.random_max)
        tally = self.flip(times)
        return RandomFlipResult(
            message=f"Flipped coins {times} times", heads=tally.heads, tails=tally.tails
        )

    def record_invalid_request(self, raw: str | None = None) -> None:
        self.registry.increment_counter(ERROR_COUNTER)
        logger.warning("invalid flip request", extra={"event": {"times": raw}})

    def reset_counters(self) -> None:
        self.registry.reset_counters((HEADS_COUNT, TAILS_COUNT, FLIP_COUNT))
        logger.info("counters reset")

    def current_counts(self) -> CurrentCounts:
        values = self.registry.get_values((HEADS_COUNT, TAILS_COUNT, FLIP_COUNT))
        return CurrentCounts(
            heads=values[HEADS_COUNT],
            tails=values[TAILS_COUNT],
            total_flips=values[FLIP_COUNT],
        )

    def stats(self) -> FlipStats:
        counts = self.current_counts()
        return FlipStats(
            total_flips=counts.total_flips,
            heads=counts.heads,
            tails=counts.tails,
            heads_percentage=format_percentage(counts.heads, counts.total_flips),
            tails_percentage=format_percentage(counts.tails, counts.total_flips),
        )
