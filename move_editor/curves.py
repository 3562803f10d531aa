"""
Cubic Bezier helpers shared by the marker model, playback, and field drawing.

Curves are always four normalized points: start anchor, two handles, and end
anchor. Evaluation is the plain Bernstein polynomial; ``t`` is not clamped, so
values outside ``[0, 1]`` extrapolate.
"""

from __future__ import annotations

import math
from typing import List, Sequence

import numpy as np

from .data_structures import CurvePoints, NormalizedPoint

# Control point distance for a cubic approximation of a quarter circle.
CIRCLE_K = 4.0 / 3.0 * (math.sqrt(2.0) - 1.0)


def _as_array(pts: Sequence[NormalizedPoint]) -> np.ndarray:
    arr = np.asarray(pts, dtype=np.float64)
    if arr.shape != (4, 2):
        raise ValueError(f"Expected 4 points of shape (4, 2), got {arr.shape}.")
    return arr


def _to_points(arr: np.ndarray) -> CurvePoints:
    return tuple((float(x), float(y)) for x, y in arr)  # type: ignore[return-value]


def evaluate_cubic_bezier(pts: Sequence[NormalizedPoint], t: float) -> NormalizedPoint:
    """
    Evaluate a cubic Bezier curve at parameter ``t``.

    Returns ``pts[0]`` exactly at ``t == 0`` and ``pts[3]`` exactly at ``t == 1``.
    """
    arr = _as_array(pts)
    s = 1.0 - t
    weights = np.array([s**3, 3.0 * s**2 * t, 3.0 * s * t**2, t**3], dtype=np.float64)
    x, y = weights @ arr
    return float(x), float(y)


def continuation_curve(prev: Sequence[NormalizedPoint]) -> CurvePoints:
    """
    Derive the curve for the next keyframe from the previous one.

    The new curve starts where ``prev`` ends, leaves with the same exit
    tangent, and repeats the same total displacement.
    """
    p0, p1, p2, p3 = _as_array(prev)
    movement = p3 - p0
    last_segment_speed = p3 - p2
    last_control_offset = p3 - p1
    return _to_points(
        np.stack(
            [
                p3,
                p3 + last_segment_speed,
                p3 + last_control_offset,
                p3 + movement,
            ]
        )
    )


def quarter_circle_bezier(
    center: NormalizedPoint,
    radius: float,
    quadrant: int,
) -> CurvePoints:
    """
    Four-point cubic approximation of a quarter circle around ``center``.

    Quadrant 0 runs from ``center + (0, r)`` to ``center + (r, 0)``. Every
    quadrant step rotates the arc by 90 degrees, ``(x, y) -> (y, -x)``, which is
    counter-clockwise on a y-down screen.
    """
    unit = np.array(
        [
            [0.0, 1.0],
            [CIRCLE_K, 1.0],
            [1.0, CIRCLE_K],
            [1.0, 0.0],
        ]
    )
    for _ in range(quadrant % 4):
        unit = np.stack([unit[:, 1], -unit[:, 0]], axis=1)
    return _to_points(np.asarray(center, dtype=np.float64) + radius * unit)


def sample_cubic_bezier(pts: Sequence[NormalizedPoint], segments: int = 32) -> List[NormalizedPoint]:
    """
    Evaluate ``segments + 1`` evenly spaced points along the curve, ends included.
    """
    if segments < 1:
        raise ValueError("segments must be >= 1")
    return [evaluate_cubic_bezier(pts, i / segments) for i in range(segments + 1)]
