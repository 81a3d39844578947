from __future__ import annotations

def clamp(x: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return lo if x < lo else hi if x > hi else x

def scale(x: float, lo: float, hi: float) -> float:
    return (x - lo) / (hi - lo)
