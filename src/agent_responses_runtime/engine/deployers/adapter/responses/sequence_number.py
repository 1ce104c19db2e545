# -*- coding: utf-8 -*-
from abc import ABC, abstractmethod


class SequenceNumber(ABC):
    """Source of the ``sequence_number`` carried by every stream event"""

    @abstractmethod
    def current(self) -> int:
        """Peek at the next number without consuming it."""

    @abstractmethod
    def next(self) -> int:
        """Return the current number and advance."""


class DefaultSequenceNumber(SequenceNumber):
    # Owned by a single projector, never shared across responses
    def __init__(self, start: int = 0):
        self._value = start

    def current(self) -> int:
        return self._value

    def next(self) -> int:
        value = self._value
        self._value += 1
        return value
