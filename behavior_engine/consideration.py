"""
Considerations: one scored input signal of a decision.

A Consideration samples a host-supplied signal, rescales it from its input
range into [0, 1], reshapes it through a response curve and clips the result
back into [0, 1].
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Tuple

from .curves import CurveFunction, identity
from .errors import ConstructionError
from .util import clamp, scale

UtilityFunction = Callable[[], float]

# Range meaning "the signal is already normalised, do not rescale"
NO_RESCALE: Tuple[float, float] = (1.0, 1.0)


@dataclass(frozen=True)
class Consideration:
    """
    A single signal, normalised and curve-shaped into [0, 1].

    Attributes:
        description: Human-readable label
        signal: Callable returning the raw signal value
        curve: Response curve applied after normalisation
        input_range: (min, max) of the raw signal; NO_RESCALE skips scaling
    """
    description: str
    signal: UtilityFunction = field(repr=False)
    curve: CurveFunction = field(default_factory=identity, repr=False)
    input_range: Tuple[float, float] = NO_RESCALE

    def __post_init__(self):
        """Reject degenerate ranges at construction time."""
        try:
            lo, hi = (float(v) for v in self.input_range)
        except (TypeError, ValueError) as e:
            raise ConstructionError(
                f"Consideration '{self.description}': invalid range {self.input_range!r}"
            ) from e
        object.__setattr__(self, "input_range", (lo, hi))

        if not callable(self.signal):
            raise ConstructionError(f"Consideration '{self.description}': signal is not callable")
        if not callable(self.curve):
            raise ConstructionError(f"Consideration '{self.description}': curve is not callable")
        if self.rescales and not lo < hi:
            raise ConstructionError(
                f"Consideration '{self.description}': range min must be below max, "
                f"got ({lo}, {hi})"
            )

    @property
    def rescales(self) -> bool:
        """Whether the raw signal is rescaled by the input range."""
        return self.input_range != NO_RESCALE

    def normalize(self, value: float) -> float:
        """Map a raw signal value onto the unit interval (unclipped)."""
        if not self.rescales:
            return value
        lo, hi = self.input_range
        return scale(value, lo, hi)

    def compute_score(self) -> float:
        """
        Sample the signal and return its utility score.

        Returns:
            Score in [0, 1]
        """
        score = self.curve(self.normalize(float(self.signal())))
        if math.isnan(score):
            return 0.0
        return clamp(score)
