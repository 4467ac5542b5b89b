from __future__ import annotations

import math
import random
from typing import MutableSequence, Sequence, TypeVar


T = TypeVar("T")


def uniform_int(rng: random.Random, lo: int, hi: int) -> int:
    return rng.randint(int(lo), int(hi))


def sample_without_replacement(rng: random.Random, population: Sequence[T], n: int) -> list[T]:
    return rng.sample(list(population), int(n))


def shuffle(rng: random.Random, items: MutableSequence[T]) -> MutableSequence[T]:
    """Fisher-Yates shuffle in place; returns ``items`` for chaining."""
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


def weighted_choice(rng: random.Random, outcomes: Sequence[tuple[float, T]]) -> T:
    """Draw one value from ``(probability, value)`` pairs with a single uniform roll.

    When the probabilities sum to less than the roll (rounding, or a model that
    does not normalise) the last value is returned.
    """
    if not outcomes:
        raise ValueError("weighted_choice requires at least one outcome")
    roll = rng.random()
    cumulative = 0.0
    for probability, value in outcomes:
        cumulative += probability
        if roll < cumulative:
            return value
    return outcomes[-1][1]


def sigmoid(x: float) -> float:
    if x < -700:
        return 0.0
    return 1.0 / (1.0 + math.exp(-x))


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
