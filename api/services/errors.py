"""Exceptions raised by the calculation services for unusable inputs."""

from __future__ import annotations

from typing import Iterable, List


class CalculationInputError(ValueError):
    """Base class for inputs a calculation cannot proceed with.

    ``errors`` always carries every problem found so callers can report
    them together instead of one at a time.
    """

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or self.__class__.__name__)


class InvalidCoordinatesError(CalculationInputError):
    pass


class InvalidDateRangeError(CalculationInputError):
    pass


class PolarConditionsError(CalculationInputError):
    """The sun does not rise or set at the location on the requested date."""
