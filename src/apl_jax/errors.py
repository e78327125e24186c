"""Structured error types for array-operator failures."""

from __future__ import annotations

from dataclasses import dataclass


class APLError(Exception):
    """Base class for structured apl-jax errors."""


class APLShapeError(APLError):
    """Rank or shape of an argument does not suit the operator."""


class APLLengthError(APLShapeError):
    """Conforming axes have different lengths."""


@dataclass(frozen=True)
class APLAxisError(APLError):
    """Target axis lies outside ``[0, rank)``."""

    axis: int
    rank: int
    where: str = "axis"

    def __str__(self) -> str:
        return f"{self.where}: axis {self.axis} out of range for rank {self.rank}"


class APLAxisGroupError(APLError):
    """Axis group is not strictly ascending, or not contiguous where required."""


class APLExhaustedError(APLError):
    """Degrees vector consumed more segments than the axis provides."""


class APLIndexError(APLError):
    """Index specification does not address positions inside the array."""


class APLDomainError(APLError):
    """Element values are outside the operator's domain."""
