"""
Drawing helpers for the field, markers, and control-point handles.

The model never draws directly; it talks to a :class:`Painter`. The default
implementation, :class:`CvPainter`, draws onto a BGR ``numpy`` canvas with
OpenCV so the same code serves the interactive window and offline video
rendering. Colours follow the OpenCV BGR convention.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generator, Optional, Protocol, Sequence, Tuple

import cv2
import numpy as np

from .animator import ValueAnimator
from .config import DEFAULT_CONFIG, Config
from .curves import sample_cubic_bezier
from .data_structures import NormalizedPoint, Role, ScreenPoint, ScreenRect
from .interaction import MarkerInteraction, PointerInput, PointerTracker
from .marker import Marker
from .utils.geometry import to_screen

if TYPE_CHECKING:
    from .animation import Animation

Frame = np.ndarray[Any, np.dtype[np.uint8]]
Color = Tuple[int, int, int]


@dataclass(frozen=True)
class Stroke:
    width: int = 1
    color: Color = (128, 128, 128)


@dataclass(frozen=True)
class TextStyle:
    color: Color = (255, 255, 255)
    scale: float = 0.4
    thickness: int = 1
    centered: bool = True


@dataclass(frozen=True)
class Theme:
    """
    Colours for one UI theme.
    """

    background: Color
    field_line: Color
    free_throw_line: Color
    goal: Color
    handle: Color
    path: Color
    text: Color
    button: Color
    button_active: Color


DARK_THEME = Theme(
    background=(27, 27, 27),
    field_line=(0, 255, 255),
    free_throw_line=(150, 255, 255),
    goal=(0, 0, 255),
    handle=(128, 128, 128),
    path=(80, 80, 80),
    text=(230, 230, 230),
    button=(60, 60, 60),
    button_active=(110, 90, 40),
)

LIGHT_THEME = Theme(
    background=(248, 248, 248),
    field_line=(0, 150, 210),
    free_throw_line=(120, 200, 230),
    goal=(0, 0, 210),
    handle=(140, 140, 140),
    path=(200, 200, 200),
    text=(20, 20, 20),
    button=(220, 220, 220),
    button_active=(240, 200, 140),
)


@dataclass(frozen=True)
class MarkerStyle:
    fill: Color
    outline: Optional[Stroke] = None
    label: Color = (255, 255, 255)


_ROLE_COLORS = {
    Role.ATTACKING: ((40, 40, 220), (90, 90, 255)),
    Role.DEFENDING: ((200, 110, 30), (255, 170, 80)),
    Role.BALL: ((0, 190, 255), (120, 230, 255)),
}


def marker_style(role: Role, active: bool, theme: Theme = DARK_THEME) -> MarkerStyle:
    """
    Visual style of a marker from its role and selection state.
    """
    idle, highlighted = _ROLE_COLORS[role]
    label = (0, 0, 0) if role is Role.BALL else (255, 255, 255)
    if active:
        return MarkerStyle(fill=highlighted, outline=Stroke(2, theme.text), label=label)
    return MarkerStyle(fill=idle, label=label)


class Painter(Protocol):
    """
    Drawing surface used by the field and marker renderers (screen space).
    """

    def draw_line(self, p1: ScreenPoint, p2: ScreenPoint, stroke: Stroke) -> None:
        ...

    def draw_circle(
        self,
        center: ScreenPoint,
        radius: float,
        fill: Color,
        outline: Optional[Stroke] = None,
    ) -> None:
        ...

    def draw_text(self, pos: ScreenPoint, text: str, style: TextStyle) -> None:
        ...

    def draw_cubic_curve(self, points: Sequence[ScreenPoint], stroke: Stroke) -> None:
        ...

    def draw_rect(
        self,
        rect: ScreenRect,
        stroke: Optional[Stroke] = None,
        fill: Optional[Color] = None,
    ) -> None:
        ...

    def is_region_visible(self, rect: ScreenRect) -> bool:
        ...


def _px(point: ScreenPoint) -> Tuple[int, int]:
    return int(round(point[0])), int(round(point[1]))


@dataclass
class CvPainter:
    """
    :class:`Painter` drawing onto a BGR uint8 canvas with OpenCV.

    Attributes:
        canvas: Image modified in place by every draw call.
        curve_segments: Polyline segments used to approximate a cubic curve.
    """

    canvas: Frame
    curve_segments: int = 32

    @property
    def bounds(self) -> ScreenRect:
        h, w = self.canvas.shape[:2]
        return ScreenRect(0.0, 0.0, float(w), float(h))

    def draw_line(self, p1: ScreenPoint, p2: ScreenPoint, stroke: Stroke) -> None:
        cv2.line(self.canvas, _px(p1), _px(p2), stroke.color, stroke.width, cv2.LINE_AA)

    def draw_circle(
        self,
        center: ScreenPoint,
        radius: float,
        fill: Color,
        outline: Optional[Stroke] = None,
    ) -> None:
        r = max(1, int(round(radius)))
        cv2.circle(self.canvas, _px(center), r, fill, -1, cv2.LINE_AA)
        if outline is not None:
            cv2.circle(self.canvas, _px(center), r, outline.color, outline.width, cv2.LINE_AA)

    def draw_text(self, pos: ScreenPoint, text: str, style: TextStyle) -> None:
        if not text:
            return
        font = cv2.FONT_HERSHEY_SIMPLEX
        x, y = _px(pos)
        if style.centered:
            (text_width, text_height), _baseline = cv2.getTextSize(
                text, font, style.scale, style.thickness
            )
            x -= text_width // 2
            y += text_height // 2
        cv2.putText(
            self.canvas,
            text,
            (x, y),
            font,
            style.scale,
            style.color,
            style.thickness,
            cv2.LINE_AA,
        )

    def draw_cubic_curve(self, points: Sequence[ScreenPoint], stroke: Stroke) -> None:
        samples = sample_cubic_bezier(points, self.curve_segments)
        pts = np.asarray([_px(p) for p in samples], dtype=np.int32).reshape(-1, 1, 2)
        cv2.polylines(self.canvas, [pts], False, stroke.color, stroke.width, cv2.LINE_AA)

    def draw_rect(
        self,
        rect: ScreenRect,
        stroke: Optional[Stroke] = None,
        fill: Optional[Color] = None,
    ) -> None:
        p1 = _px((rect.min_x, rect.min_y))
        p2 = _px((rect.max_x, rect.max_y))
        if fill is not None:
            cv2.rectangle(self.canvas, p1, p2, fill, -1)
        if stroke is not None:
            cv2.rectangle(self.canvas, p1, p2, stroke.color, stroke.width)

    def is_region_visible(self, rect: ScreenRect) -> bool:
        return self.bounds.intersects(rect)


def new_canvas(size: Tuple[int, int], theme: Theme = DARK_THEME) -> Frame:
    """
    Blank canvas of ``(width, height)`` pixels filled with the theme background.
    """
    width, height = size
    return np.full((height, width, 3), theme.background, dtype=np.uint8)


def field_rect_for_canvas(
    size: Tuple[int, int],
    header_height: int,
    margin: int = 10,
) -> ScreenRect:
    """
    Largest square field rectangle below the header, centred horizontally.
    """
    width, height = size
    side = max(1, min(width, height - header_height) - 2 * margin)
    left = (width - side) / 2.0
    top = float(header_height + margin)
    return ScreenRect(left, top, left + side, top + side)


@dataclass
class DisplayContext:
    """
    Everything one redraw tick needs besides the model.

    Attributes:
        painter: Drawing surface.
        pointer: Hit-region input for edit mode.
        animator: Smooth values (control point radii).
        now: Current time in seconds.
        config: Radii, hit-test scale, and easing settings.
        theme: Colours.
    """

    painter: Painter
    pointer: PointerInput = field(default_factory=PointerTracker)
    animator: ValueAnimator = field(default_factory=ValueAnimator)
    now: float = 0.0
    config: Config = field(default_factory=Config)
    theme: Theme = DARK_THEME


def draw_editing_marker(
    ctx: DisplayContext,
    marker: Marker,
    interaction: MarkerInteraction,
    rect: ScreenRect,
) -> None:
    """
    Draw a marker in edit mode using this tick's interaction feedback.

    The active curved marker also shows its handles, its path, and control
    points 1-3. Inactive curved markers show only a muted path.
    """
    painter = ctx.painter
    style = marker_style(marker.role, marker.active, ctx.theme)

    if marker.is_curve:
        screen_pts = [to_screen(p, rect) for p in marker.control_points()]
        if marker.active:
            handle = Stroke(1, ctx.theme.handle)
            painter.draw_line(screen_pts[0], screen_pts[1], handle)
            painter.draw_line(screen_pts[2], screen_pts[3], handle)
            painter.draw_cubic_curve(screen_pts, handle)
        else:
            painter.draw_cubic_curve(screen_pts, Stroke(1, ctx.theme.path))

    for feedback in interaction.points[1:]:
        radius = ctx.animator.animate(
            feedback.key, feedback.target_radius, ctx.config.radius_ease_s, ctx.now
        )
        painter.draw_circle(feedback.screen_pos, radius, style.fill)

    main = interaction.points[0]
    radius = ctx.animator.animate(main.key, main.target_radius, ctx.config.radius_ease_s, ctx.now)
    painter.draw_circle(main.screen_pos, radius, style.fill, style.outline)
    painter.draw_text(main.screen_pos, marker.label, TextStyle(color=style.label))


def draw_playback_marker(
    painter: Painter,
    marker: Marker,
    position: NormalizedPoint,
    rect: ScreenRect,
    config: Config = DEFAULT_CONFIG,
    theme: Theme = DARK_THEME,
) -> None:
    """
    Draw a read-only marker at an interpolated position.
    """
    style = marker_style(marker.role, False, theme)
    screen_pt = to_screen(position, rect)
    painter.draw_circle(screen_pt, config.primary_radii[0], style.fill)
    painter.draw_text(screen_pt, marker.label, TextStyle(color=style.label))


def render_playback(
    animation: "Animation",
    config: Config = DEFAULT_CONFIG,
    theme: Theme = DARK_THEME,
) -> Generator[Tuple[float, Frame], None, None]:
    """
    Render the whole animation at ``config.video_fps``.

    Yields:
        (playback_time, frame) where playback_time is measured in steps.
    """
    num_steps = len(animation.frames)
    total_s = num_steps * config.seconds_per_step
    n_frames = int(round(total_s * config.video_fps)) + 1
    rect = field_rect_for_canvas(config.canvas_size, config.header_height)
    for i in range(n_frames):
        playback_time = (i / config.video_fps) / config.seconds_per_step
        canvas = new_canvas(config.canvas_size, theme)
        painter = CvPainter(canvas)
        ctx = DisplayContext(painter=painter, now=i / config.video_fps, config=config, theme=theme)
        step = min(int(playback_time), num_steps - 1) + 1
        painter.draw_text(
            (10.0, config.header_height / 2.0),
            f"Step {step}/{num_steps}",
            TextStyle(color=theme.text, scale=0.6, centered=False),
        )
        animation.display(ctx, rect, playback_time)
        yield playback_time, canvas
