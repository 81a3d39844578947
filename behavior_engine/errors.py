"""
Exceptions raised by the decision engine.

Construction problems are reported when an object is built, never while
scoring. The two runtime failures of the best-decision search are kept as
separate classes so a host can tell "nothing was loaded" apart from
"nothing applies right now".
"""
from __future__ import annotations


class DecisionException(RuntimeError):
    """Base class for all engine errors."""
    pass


class ConstructionError(DecisionException, ValueError):
    """Raised when a curve, consideration or decision cannot be built."""
    pass


class EmptyActiveSetError(DecisionException):
    """Raised when a best decision is requested while no event is active."""
    pass


class NoActivationError(DecisionException):
    """Raised when every active decision scored zero."""
    pass
