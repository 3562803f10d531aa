"""
Core data structures for markers, movements, and screen geometry.

Two coordinate spaces are used throughout the project and must never be mixed:

- *Normalized space*: ``x`` and ``y`` in ``[0, 1]`` with the origin at the
  top-left corner of the field. All model and persisted data lives here.
- *Screen space*: pixels with the origin at the top-left corner of the canvas.
  The field is drawn into a :class:`ScreenRect` inside that canvas.

A marker's movement within one keyframe is either :class:`Fixed` (stationary)
or :class:`Curve` (a cubic Bezier). Both are frozen so copying a marker never
shares mutable state between frames.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

# Normalized field coordinate (unit square, top-left origin).
NormalizedPoint = Tuple[float, float]
# Pixel coordinate on the canvas.
ScreenPoint = Tuple[float, float]
# Differences between two points in either space.
Vector2D = Tuple[float, float]

CurvePoints = Tuple[NormalizedPoint, NormalizedPoint, NormalizedPoint, NormalizedPoint]
MarkerKeys = Tuple[int, int, int, int]


def as_point(value: object) -> Tuple[float, float]:
    """
    Coerce a two-element sequence (tuple, list, numpy array) into a float tuple.
    """
    x, y = value  # type: ignore[misc]
    return float(x), float(y)


class Role(str, Enum):
    """
    What a marker represents on the field.
    """

    ATTACKING = "attacking"
    DEFENDING = "defending"
    BALL = "ball"


@dataclass(frozen=True)
class Fixed:
    """
    Stationary movement: the marker stays at ``point`` for the whole frame.
    """

    point: NormalizedPoint

    def __post_init__(self) -> None:
        object.__setattr__(self, "point", as_point(self.point))


@dataclass(frozen=True)
class Curve:
    """
    Cubic Bezier movement in normalized space.

    Attributes:
        points: Start anchor, first handle, second handle, end anchor.
    """

    points: CurvePoints

    def __post_init__(self) -> None:
        pts = tuple(as_point(p) for p in self.points)
        if len(pts) != 4:
            raise ValueError(f"A curve needs exactly 4 control points, got {len(pts)}.")
        object.__setattr__(self, "points", pts)


Movement = Union[Fixed, Curve]


@dataclass(frozen=True)
class ScreenRect:
    """
    Axis-aligned pixel rectangle.

    Attributes:
        min_x: Left edge in pixels.
        min_y: Top edge in pixels.
        max_x: Right edge in pixels.
        max_y: Bottom edge in pixels.
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_center_size(cls, center: ScreenPoint, size: float) -> "ScreenRect":
        """
        Square of side ``size`` centred on ``center``.
        """
        cx, cy = center
        half = size / 2.0
        return cls(cx - half, cy - half, cx + half, cy + half)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> ScreenPoint:
        return (self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0

    def contains(self, point: ScreenPoint) -> bool:
        x, y = point
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def intersects(self, other: "ScreenRect") -> bool:
        return not (
            other.max_x < self.min_x
            or other.min_x > self.max_x
            or other.max_y < self.min_y
            or other.min_y > self.max_y
        )
