"""
Handball field line art in normalized coordinates.

The field is drawn as the attacking half seen from above with the goal on the
top edge. Distances are expressed as fractions of the 20 m field width so the
drawing scales with the square field rectangle.
"""

from __future__ import annotations

from dataclasses import dataclass

from .curves import quarter_circle_bezier
from .data_structures import NormalizedPoint, ScreenRect
from .utils.geometry import to_screen
from .visualization import DARK_THEME, Painter, Stroke, Theme


@dataclass(frozen=True)
class FieldGeometry:
    """
    Handball field dimensions in meters.

    Attributes:
        field_width_m: Width of the field (touchline to touchline).
        goal_width_m: Inner width of the goal.
        six_m: Radius of the goal area line.
        nine_m: Radius of the free-throw line.
        goal_depth: Drawn thickness of the goal bar (normalized).
    """

    field_width_m: float = 20.0
    goal_width_m: float = 3.0
    six_m: float = 6.0
    nine_m: float = 9.0
    goal_depth: float = 0.01

    @property
    def goal_width(self) -> float:
        return self.goal_width_m / self.field_width_m

    @property
    def until_goal(self) -> float:
        """
        Normalized distance from the left touchline to the left goal post.
        """
        return (self.field_width_m - self.goal_width_m) / 2.0 / self.field_width_m

    def radius(self, meters: float) -> float:
        return meters / self.field_width_m

    @property
    def left_post(self) -> NormalizedPoint:
        return self.until_goal, 0.0

    @property
    def right_post(self) -> NormalizedPoint:
        return self.until_goal + self.goal_width, 0.0


HANDBALL_FIELD = FieldGeometry()


def draw_field(
    painter: Painter,
    rect: ScreenRect,
    theme: Theme = DARK_THEME,
    show_free_throw_line: bool = False,
    geometry: FieldGeometry = HANDBALL_FIELD,
) -> None:
    """
    Draw the outline, goal, goal-area line, and optionally the free-throw line.
    """
    painter.draw_rect(rect, stroke=Stroke(1, theme.field_line))

    goal_min = to_screen((geometry.until_goal, 0.0), rect)
    goal_max = to_screen((1.0 - geometry.until_goal, geometry.goal_depth), rect)
    painter.draw_rect(ScreenRect(goal_min[0], goal_min[1], goal_max[0], goal_max[1]), fill=theme.goal)

    if show_free_throw_line:
        _draw_goal_line(painter, rect, geometry, geometry.radius(geometry.nine_m), Stroke(1, theme.free_throw_line))
    _draw_goal_line(painter, rect, geometry, geometry.radius(geometry.six_m), Stroke(1, theme.field_line))


def _draw_goal_line(
    painter: Painter,
    rect: ScreenRect,
    geometry: FieldGeometry,
    radius: float,
    stroke: Stroke,
) -> None:
    # Quarter circles around each post joined by a straight segment.
    left = quarter_circle_bezier(geometry.left_post, radius, 3)
    right = quarter_circle_bezier(geometry.right_post, radius, 0)
    painter.draw_cubic_curve([to_screen(p, rect) for p in left], stroke)
    painter.draw_cubic_curve([to_screen(p, rect) for p in right], stroke)

    straight_start = (geometry.left_post[0], radius)
    straight_end = (geometry.right_post[0], radius)
    painter.draw_line(to_screen(straight_start, rect), to_screen(straight_end, rect), stroke)
