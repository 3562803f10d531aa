"""
Marker model: a single labeled player or ball and its movement in one keyframe.

Each marker carries four interaction keys, one per control point. Only the
first key is used while the movement is :class:`Fixed`; all four are used for
a :class:`Curve`. Keys come from the owning animation's
:class:`IdentitySequence` so that identity assignment is deterministic and
there is no process-wide counter.

Editing rules:
- Only the ``active`` marker can be dragged. Its main point moves the whole
  path; control points 1-3 reshape a curve.
- Control points 1-3 of a fixed marker do not exist; touching them is a
  programming error and raises :class:`ControlPointError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Sequence, Tuple, cast

from .curves import continuation_curve, evaluate_cubic_bezier
from .data_structures import (
    Curve,
    Fixed,
    MarkerKeys,
    Movement,
    NormalizedPoint,
    Role,
    Vector2D,
    as_point,
)

# Offsets of control points 1-3 from the anchor when a fixed marker becomes a curve.
DEFAULT_CURVE_OFFSETS: Tuple[Vector2D, Vector2D, Vector2D] = (
    (0.05, 0.0),
    (0.10, 0.05),
    (0.10, 0.10),
)


class ControlPointError(ValueError):
    """
    Raised when a curve-only control point is addressed on a fixed marker.
    """


@dataclass
class IdentitySequence:
    """
    Monotonic source of interaction keys owned by one animation.

    Attributes:
        next_key: Key handed out by the next call to :meth:`take`.
    """

    next_key: int = 1

    def take(self) -> MarkerKeys:
        """
        Reserve four consecutive keys for a new marker.
        """
        start = self.next_key
        self.next_key += 4
        return start, start + 1, start + 2, start + 3

    def reserve_past(self, key: int) -> None:
        """
        Make sure future keys are strictly greater than ``key``.
        """
        self.next_key = max(self.next_key, key + 1)


def _shift(point: NormalizedPoint, delta: Vector2D) -> NormalizedPoint:
    return point[0] + delta[0], point[1] + delta[1]


@dataclass
class Marker:
    """
    One movable entity (player or ball) within a keyframe.

    Attributes:
        keys: Interaction keys for control points 0-3.
        movement: Path for this frame, :class:`Fixed` or :class:`Curve`.
        label: Short text drawn on the marker (e.g. "LW").
        role: Attacking, defending, or ball.
        active: True for the single marker selected for path editing.
    """

    keys: MarkerKeys
    movement: Movement
    label: str
    role: Role
    active: bool = field(default=False)

    @classmethod
    def create(
        cls,
        movement: Movement,
        label: str,
        role: Role,
        ids: IdentitySequence,
    ) -> "Marker":
        """
        Create an inactive marker with four fresh keys from ``ids``.
        """
        return cls(keys=ids.take(), movement=movement, label=label, role=Role(role))

    @property
    def is_curve(self) -> bool:
        return isinstance(self.movement, Curve)

    def control_points(self) -> Tuple[NormalizedPoint, ...]:
        """
        The meaningful points of the movement: one for fixed, four for curves.
        """
        movement = self.movement
        if isinstance(movement, Fixed):
            return (movement.point,)
        if isinstance(movement, Curve):
            return movement.points
        raise TypeError(f"Unknown movement type: {type(movement).__name__}")

    @property
    def anchor(self) -> NormalizedPoint:
        """
        Start position of the movement (the main, always clickable point).
        """
        return self.control_points()[0]

    def derive_next(self, ids: IdentitySequence) -> "Marker":
        """
        Seed this marker's state for the following keyframe.

        Curves continue with :func:`continuation_curve`; fixed markers stay put.
        """
        movement = self.movement
        if isinstance(movement, Fixed):
            next_movement: Movement = Fixed(movement.point)
        elif isinstance(movement, Curve):
            next_movement = Curve(continuation_curve(movement.points))
        else:
            raise TypeError(f"Unknown movement type: {type(movement).__name__}")
        return Marker.create(next_movement, self.label, self.role, ids)

    def toggle_path_type(
        self,
        offsets: Sequence[Vector2D] = DEFAULT_CURVE_OFFSETS,
    ) -> None:
        """
        Switch between a fixed point and a curve starting at that point.

        A curve collapses back to its start anchor and drops its control points.
        """
        movement = self.movement
        if isinstance(movement, Fixed):
            p = movement.point
            self.movement = Curve((p, *(_shift(p, d) for d in offsets)))  # type: ignore[arg-type]
        elif isinstance(movement, Curve):
            self.movement = Fixed(movement.points[0])
        else:
            raise TypeError(f"Unknown movement type: {type(movement).__name__}")

    def translate(self, delta: Vector2D, control_index: int = 0) -> bool:
        """
        Move the path (index 0) or one curve control point (indices 1-3).

        Inactive markers are never moved. Returns True when a point moved.

        Raises:
            IndexError: If ``control_index`` is outside 0-3.
            ControlPointError: If indices 1-3 are used on a fixed marker.
        """
        if not 0 <= control_index <= 3:
            raise IndexError(f"control_index must be in 0..3, got {control_index}")
        if not self.active:
            return False

        delta = as_point(delta)
        movement = self.movement
        if isinstance(movement, Fixed):
            if control_index != 0:
                raise ControlPointError(
                    f"Marker {self.label!r} is fixed and has no control point {control_index}."
                )
            self.movement = Fixed(_shift(movement.point, delta))
        elif isinstance(movement, Curve):
            if control_index == 0:
                pts = tuple(_shift(p, delta) for p in movement.points)
            else:
                pts = tuple(
                    _shift(p, delta) if idx == control_index else p
                    for idx, p in enumerate(movement.points)
                )
            self.movement = Curve(pts)  # type: ignore[arg-type]
        else:
            raise TypeError(f"Unknown movement type: {type(movement).__name__}")
        return True

    def evaluated_position(self, t: float) -> NormalizedPoint:
        """
        Position along the movement at parameter ``t`` (ignored for fixed markers).
        """
        movement = self.movement
        if isinstance(movement, Fixed):
            return movement.point
        if isinstance(movement, Curve):
            return evaluate_cubic_bezier(movement.points, t)
        raise TypeError(f"Unknown movement type: {type(movement).__name__}")

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a JSON-serializable dictionary.
        """
        movement = self.movement
        if isinstance(movement, Fixed):
            kind = "fixed"
        elif isinstance(movement, Curve):
            kind = "curve"
        else:
            raise TypeError(f"Unknown movement type: {type(movement).__name__}")
        return {
            "keys": list(self.keys),
            "label": self.label,
            "role": self.role.value,
            "active": bool(self.active),
            "movement": {
                "kind": kind,
                "points": [list(p) for p in self.control_points()],
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Marker":
        """
        Construct a marker from a mapping produced by :meth:`to_dict`.
        """
        try:
            keys = tuple(int(k) for k in cast(Sequence[Any], data["keys"]))
            movement_data = cast(Mapping[str, Any], data["movement"])
            kind = str(movement_data["kind"])
            points = [as_point(p) for p in cast(Sequence[Any], movement_data["points"])]
            role = Role(data["role"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Malformed marker entry: {exc}") from exc

        if len(keys) != 4:
            raise ValueError(f"Marker needs 4 keys, got {len(keys)}.")
        if kind == "fixed":
            if len(points) != 1:
                raise ValueError(f"Fixed movement needs 1 point, got {len(points)}.")
            movement: Movement = Fixed(points[0])
        elif kind == "curve":
            movement = Curve(tuple(points))  # type: ignore[arg-type]
        else:
            raise ValueError(f"Unknown movement kind: {kind!r}")

        return cls(
            keys=cast(MarkerKeys, keys),
            movement=movement,
            label=str(data.get("label", "")),
            role=role,
            active=bool(data.get("active", False)),
        )
