from __future__ import annotations


class WeightingError(ValueError):
    """Base class for failures in weight derivation and weighted statistics."""


class DimensionMismatch(WeightingError):
    def __init__(self, expected: int, observed: int, what: str = "input") -> None:
        self.expected = expected
        self.observed = observed
        super().__init__(f"Length mismatch for {what}: expected {expected}, got {observed}.")


class DegenerateProbability(WeightingError):
    """A fitted probability at `index` leaves the raw weight undefined."""

    def __init__(self, index: int, value: float, reason: str) -> None:
        self.index = index
        self.value = value
        super().__init__(f"Degenerate fitted probability {value!r} at row {index}: {reason}.")


class EmptyRespondentGroup(WeightingError):
    pass


class ZeroWeightSum(WeightingError):
    pass
