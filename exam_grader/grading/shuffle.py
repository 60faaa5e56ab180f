"""
Deterministic shuffling of questions and options.

The same seed always yields the same order, so an attempt can be
re-rendered in the order the student first saw it.
"""

import random
from collections.abc import Callable, Sequence
from typing import TypeVar

T = TypeVar("T")

# Linear congruential generator constants
_MULTIPLIER = 1103515245
_INCREMENT = 12345
_MASK = 0x7FFFFFFF
_WORD = 2**32


def seeded_random(seed: int) -> Callable[[], float]:
    """
    Create a seeded pseudo-random generator.

    Returns a function producing floats in [0, 1]. Each step is computed
    in double precision and wrapped to 32 bits before masking, which is
    how the web client renders shuffled exams, so both produce the same
    sequence for a seed.
    """
    value = seed

    def _next() -> float:
        nonlocal value
        # Double-precision product rounds above 2**53
        step = float(value) * _MULTIPLIER + _INCREMENT
        value = (int(step) % _WORD) & _MASK
        return value / _MASK

    return _next


def shuffle(items: Sequence[T], seed: int | None = None) -> list[T]:
    """
    Shuffle a sequence with the Fisher-Yates algorithm.

    Args:
        items: Items to shuffle. Never modified.
        seed: Seed for a reproducible order. Uses the process RNG if omitted.

    Returns:
        A new list with the items in shuffled order.
    """
    result = list(items)
    rand = seeded_random(seed) if seed is not None else random.random

    for i in range(len(result) - 1, 0, -1):
        # rand() may return exactly 1.0, keep j within bounds
        j = min(int(rand() * (i + 1)), i)
        result[i], result[j] = result[j], result[i]

    return result
