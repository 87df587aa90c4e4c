"""Injectable randomness for follow-up and refusal selection.

Components never call the ``random`` module directly; they take a
``RandomSource`` so tests can seed it or substitute a scripted picker.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


class RandomSource(ABC):
    """Picks one element out of a non-empty sequence."""

    @abstractmethod
    def choice(self, options: Sequence[T]) -> T: ...


class SystemRandomSource(RandomSource):
    """``random.Random`` backed source; pass ``seed`` for reproducible runs."""

    def __init__(self, seed: int | None = None) -> None:
        self._random = random.Random(seed)

    def choice(self, options: Sequence[T]) -> T:
        if not options:
            raise IndexError("Cannot choose from an empty sequence")
        return self._random.choice(options)


class FirstChoiceSource(RandomSource):
    """Always picks the first option."""

    def choice(self, options: Sequence[T]) -> T:
        if not options:
            raise IndexError("Cannot choose from an empty sequence")
        return options[0]


_default_source = SystemRandomSource()


def default_random_source() -> RandomSource:
    return _default_source
