"""
Response curves.

A curve reshapes a normalised signal (usually in [0, 1]) into a perceived
utility. Every constructor returns a plain function of one float that closes
over copies of its parameters, so curves can be shared freely between
considerations.

Two families are provided:

- Control-point curves (linear, step_before, step_after, monotone). Inputs
  at or before the first point return its y, inputs at or after the last
  point return its y, and inputs in between are resolved per family.
- Parametric shapes (identity, inverted, linear_map, power, exponential,
  binary), which act on an already normalised value.
"""
from __future__ import annotations

from bisect import bisect_left, bisect_right
from typing import Callable, Dict, Iterable, List, NamedTuple, Sequence, Tuple

import numpy as np

from .errors import ConstructionError
from .util import clamp

CurveFunction = Callable[[float], float]


class ControlPoint(NamedTuple):
    """A single (x, y) control point of a piecewise curve."""
    x: float
    y: float


def _prepare_points(
    points: Iterable[Sequence[float]],
    kind: str,
) -> Tuple[List[float], List[float]]:
    """
    Validate control points and split them into x and y lists.

    Points are sorted by x. Duplicate x values are rejected because they
    make the segment width zero.

    Raises:
        ConstructionError: If fewer than two points are given, a point is
            malformed, or two points share an x value
    """
    try:
        pts = sorted(
            (ControlPoint(float(p[0]), float(p[1])) for p in points),
            key=lambda p: p.x,
        )
    except (TypeError, IndexError, ValueError) as e:
        raise ConstructionError(f"{kind} curve: malformed control point ({e})") from e

    if len(pts) < 2:
        raise ConstructionError(
            f"{kind} curve needs at least 2 control points, got {len(pts)}"
        )

    xs = [p.x for p in pts]
    ys = [p.y for p in pts]
    if np.any(np.diff(np.asarray(xs)) <= 0):
        raise ConstructionError(f"{kind} curve: control point x values must be distinct")
    return xs, ys


# ============================================================================
# Control-point curves
# ============================================================================

def linear(points: Iterable[Sequence[float]]) -> CurveFunction:
    """Piecewise-linear interpolation through the control points."""
    xs, ys = _prepare_points(points, "linear")

    def curve(x: float) -> float:
        if x <= xs[0]:
            return ys[0]
        if x >= xs[-1]:
            return ys[-1]
        i = bisect_right(xs, x) - 1
        t = (x - xs[i]) / (xs[i + 1] - xs[i])
        return (1.0 - t) * ys[i] + t * ys[i + 1]

    return curve


def step_before(points: Iterable[Sequence[float]]) -> CurveFunction:
    """
    Piecewise-constant curve taking the value of the right-hand point.

    At an interior control point the curve returns that point's own y.
    """
    xs, ys = _prepare_points(points, "step_before")

    def curve(x: float) -> float:
        if x <= xs[0]:
            return ys[0]
        if x >= xs[-1]:
            return ys[-1]
        return ys[bisect_left(xs, x)]

    return curve


def step_after(points: Iterable[Sequence[float]]) -> CurveFunction:
    """
    Piecewise-constant curve taking the value of the left-hand point.

    At an interior control point the curve still returns the y of the
    previous point; the step happens just after the point.
    """
    xs, ys = _prepare_points(points, "step_after")

    def curve(x: float) -> float:
        if x <= xs[0]:
            return ys[0]
        if x >= xs[-1]:
            return ys[-1]
        return ys[bisect_left(xs, x) - 1]

    return curve


def monotone(points: Iterable[Sequence[float]]) -> CurveFunction:
    """
    Monotone cubic Hermite spline (Fritsch-Carlson).

    Tangents are computed once at construction. Where neighbouring secant
    slopes differ in sign, or one of them is flat, the tangent is zero, so
    the spline never overshoots between control points. Evaluation finds the
    segment with a binary search and passes exactly through every knot.
    """
    xs, ys = _prepare_points(points, "monotone")
    count = len(xs) - 1
    if count < 1:
        raise ConstructionError("monotone curve has no segments")

    x_arr = np.asarray(xs)
    y_arr = np.asarray(ys)
    dxs = np.diff(x_arr)
    slopes = np.diff(y_arr) / dxs

    c1 = np.empty(count + 1)
    c1[0] = slopes[0]
    c1[-1] = slopes[-1]
    if count > 1:
        m0, m1 = slopes[:-1], slopes[1:]
        dx0, dx1 = dxs[:-1], dxs[1:]
        common = dx0 + dx1
        with np.errstate(divide="ignore", invalid="ignore"):
            blended = 3.0 * common / ((common + dx1) / m0 + (common + dx0) / m1)
        c1[1:-1] = np.where(m0 * m1 <= 0, 0.0, blended)

    common = c1[:-1] + c1[1:] - 2.0 * slopes
    c2 = (slopes - c1[:-1] - common) / dxs
    c3 = common / (dxs * dxs)

    # plain lists keep per-call evaluation free of numpy scalar overhead
    k1 = c1.tolist()
    k2 = c2.tolist()
    k3 = c3.tolist()

    def curve(x: float) -> float:
        if x <= xs[0]:
            return ys[0]
        if x >= xs[-1]:
            return ys[-1]
        i = bisect_right(xs, x) - 1
        diff = x - xs[i]
        diff_sq = diff * diff
        return ys[i] + k1[i] * diff + k2[i] * diff_sq + k3[i] * diff * diff_sq

    return curve


# ============================================================================
# Parametric shapes
# ============================================================================

def identity() -> CurveFunction:
    """Return the normalised value unchanged."""
    def curve(x: float) -> float:
        return x
    return curve


def inverted() -> CurveFunction:
    """Return one minus the normalised value."""
    def curve(x: float) -> float:
        return 1.0 - x
    return curve


def linear_map(slope: float, intercept: float) -> CurveFunction:
    """Straight line ``slope * x + intercept`` clipped to [0, 1]."""
    slope = float(slope)
    intercept = float(intercept)

    def curve(x: float) -> float:
        return clamp(slope * x + intercept)

    return curve


def power(exponent: float) -> CurveFunction:
    """
    Raise the normalised value to ``exponent``.

    The input is clipped to [0, 1] first so fractional exponents stay real.
    """
    exponent = float(exponent)
    if exponent < 0:
        raise ConstructionError(f"power curve exponent must be >= 0, got {exponent}")

    def curve(x: float) -> float:
        return clamp(x) ** exponent

    return curve


def exponential(base: float) -> CurveFunction:
    """Exponential growth rescaled so that 0 maps to 0 and 1 maps to 1."""
    base = float(base)
    if base <= 0 or base == 1.0:
        raise ConstructionError(
            f"exponential curve base must be positive and != 1, got {base}"
        )
    span = base - 1.0

    def curve(x: float) -> float:
        return (base ** x - 1.0) / span

    return curve


def binary(threshold: float) -> CurveFunction:
    """1.0 when the normalised value reaches ``threshold``, else 0.0."""
    threshold = float(threshold)

    def curve(x: float) -> float:
        return 1.0 if x >= threshold else 0.0

    return curve


# Builders by name, used by the behaviour file loader
POINT_CURVES: Dict[str, Callable[[Iterable[Sequence[float]]], CurveFunction]] = {
    "linear": linear,
    "step_before": step_before,
    "step_after": step_after,
    "monotone": monotone,
}

PARAMETRIC_CURVES: Dict[str, Callable[..., CurveFunction]] = {
    "identity": identity,
    "inverted": inverted,
    "linear_map": linear_map,
    "power": power,
    "exponential": exponential,
    "binary": binary,
}


def sample_curve(
    curve: CurveFunction,
    start: float = 0.0,
    stop: float = 1.0,
    num: int = 101,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Evaluate a curve on an evenly spaced grid.

    Useful for plotting a curve or shipping it to a visualiser.

    Args:
        curve: Curve to evaluate
        start: First x value
        stop: Last x value
        num: Number of samples (at least 2)

    Returns:
        Tuple of (xs, ys) float arrays
    """
    if num < 2:
        raise ConstructionError(f"need at least 2 samples, got {num}")
    xs = np.linspace(start, stop, num)
    ys = np.fromiter((curve(float(x)) for x in xs), dtype=float, count=num)
    return xs, ys
