"""
Utility-based decision engine.

Given a set of candidate behaviours (Decisions), each guarded by scored
signals (Considerations), the engine picks the single most useful behaviour
every tick.
"""

from .errors import (
    DecisionException,
    ConstructionError,
    EmptyActiveSetError,
    NoActivationError,
)
from .curves import (
    ControlPoint,
    CurveFunction,
    linear,
    step_before,
    step_after,
    monotone,
    identity,
    inverted,
    linear_map,
    power,
    exponential,
    binary,
    sample_curve,
)
from .consideration import Consideration, NO_RESCALE
from .decision import Decision, UtilityScore, SCORE_EPSILON
from .activation import ActivationObserver, ActivationGraph, ActivationEntry, DEFAULT_SCORE
from .config import EngineConfig
from .engine import DecisionEngine
from .loader import BehaviorSet, DecisionSpec, ConsiderationSpec, CurveSpec

__version__ = "0.1.0"

__all__ = [
    # Errors
    "DecisionException",
    "ConstructionError",
    "EmptyActiveSetError",
    "NoActivationError",

    # Curves
    "ControlPoint",
    "CurveFunction",
    "linear",
    "step_before",
    "step_after",
    "monotone",
    "identity",
    "inverted",
    "linear_map",
    "power",
    "exponential",
    "binary",
    "sample_curve",

    # Scoring
    "Consideration",
    "NO_RESCALE",
    "Decision",
    "UtilityScore",
    "SCORE_EPSILON",

    # Engine
    "DecisionEngine",
    "EngineConfig",

    # Observability
    "ActivationObserver",
    "ActivationGraph",
    "ActivationEntry",
    "DEFAULT_SCORE",

    # Behaviour files
    "BehaviorSet",
    "DecisionSpec",
    "ConsiderationSpec",
    "CurveSpec",
]
