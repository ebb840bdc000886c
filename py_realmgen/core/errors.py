"""
Exception types raised by map generation and validation.

Generation preconditions and algorithmic exhaustion are distinguished so the
calling layer can decide whether to retry with different parameters.
"""

from enum import Enum
from typing import Optional


class RealmGenError(Exception):
    """Base class for all realm generation errors."""


class PreconditionError(RealmGenError, ValueError):
    """Invalid arguments passed to a generation step."""


class RegionGrowthStuckError(RealmGenError, RuntimeError):
    """Every region frontier is exhausted while nodes remain unclaimed."""


class PerturbationTargetError(RealmGenError, RuntimeError):
    """Perturbation attempt budget ran out before reaching the target."""

    def __init__(self, label: str, reached: int, target: int):
        self.label = label
        self.reached = reached
        self.target = target
        super().__init__(
            f"{label} perturbation did not reach target differences "
            f"({reached}/{target})"
        )


class EmptyHoldingsError(RealmGenError, RuntimeError):
    """A character has no titles to choose a primary title from."""


class ValidationErrorKind(str, Enum):
    """Category of a map validation failure."""

    SHAPE = "shape"
    BOUNDS = "bounds"
    COVERAGE = "coverage"
    CROSS_MODE = "cross_mode"
    REFERENCE = "reference"


class MapValidationError(RealmGenError, ValueError):
    """A world map payload violates a structural or cross-reference invariant."""

    def __init__(
        self,
        kind: ValidationErrorKind,
        message: str,
        path: Optional[str] = None,
    ):
        self.kind = kind
        self.path = path
        self.detail = message
        location = f"{path}: " if path else ""
        super().__init__(f"[map validation] {location}{message}")
