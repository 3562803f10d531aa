"""
Pointer hit-testing and the per-marker editing state machine.

The host loop feeds raw pointer events into a :class:`PointerTracker` and calls
:meth:`PointerTracker.begin_tick` once per redraw. During the tick every
interactive element asks for a :class:`Response` for its hit region, in a fixed
order (markers in frame order, main point first). The first region that
contains the press position claims the press, so when two markers overlap the
one earlier in the frame wins.

Per control point the resulting state is ``IDLE``, ``HOVERED`` or ``DRAGGING``:

- ``IDLE -> HOVERED`` when the pointer is over the region.
- ``HOVERED -> DRAGGING`` when a press on the region moves past the drag threshold.
- ``DRAGGING -> IDLE`` on release.
- Press and release without a drag is a click; it activates the marker.
- A second click on the same region within ``double_click_s`` is a double
  click; it toggles the marker between fixed and curved and activates it.

At frame level :func:`select_exclusive` keeps at most one active marker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, Flag, auto
from typing import Hashable, List, Optional, Protocol, Sequence

from .config import DEFAULT_CONFIG, Config, Radii
from .data_structures import ScreenPoint, ScreenRect, Vector2D
from .marker import Marker
from .utils.geometry import euclidean_distance, screen_delta_to_normalized, to_screen


class InteractionState(Enum):
    IDLE = "idle"
    HOVERED = "hovered"
    DRAGGING = "dragging"


class Sense(Flag):
    """
    Which gestures a hit region reacts to.
    """

    CLICK = auto()
    DRAG = auto()
    CLICK_AND_DRAG = CLICK | DRAG


@dataclass
class Response:
    """
    Pointer outcome for one hit region during one tick.
    """

    key: Hashable
    hovered: bool = False
    dragged: bool = False
    clicked: bool = False
    double_clicked: bool = False
    drag_delta: Vector2D = (0.0, 0.0)

    @property
    def state(self) -> InteractionState:
        if self.dragged:
            return InteractionState.DRAGGING
        if self.hovered:
            return InteractionState.HOVERED
        return InteractionState.IDLE


class PointerInput(Protocol):
    """
    Protocol for per-region pointer input.

    Concrete implementations must provide an :meth:`interact` method.
    """

    def interact(self, region: ScreenRect, key: Hashable, sense: Sense) -> Response:
        """
        Report hover, drag, click, and double-click for ``region`` this tick.

        Args:
            region: Hit region in screen space.
            key: Stable identity of the region across ticks.
            sense: Gestures the region reacts to.
        """
        ...


# Press landed on no region; nothing may claim it later.
_NO_TARGET = object()


@dataclass
class PointerTracker:
    """
    Immediate-mode hit tester fed by raw pointer events.

    Events (:meth:`move`, :meth:`press`, :meth:`release`) can arrive at any time
    between ticks; :meth:`begin_tick` latches them for the next round of
    :meth:`interact` calls.

    Attributes:
        drag_threshold_px: Travel after which a press becomes a drag.
        double_click_s: Maximum time between the two clicks of a double click.
    """

    drag_threshold_px: float = 5.0
    double_click_s: float = 0.3

    _pos: Optional[ScreenPoint] = field(default=None, init=False)
    _down: bool = field(default=False, init=False)
    _press_pos: Optional[ScreenPoint] = field(default=None, init=False)
    _press_key: object = field(default=None, init=False)
    _moved: bool = field(default=False, init=False)

    _pending_press: bool = field(default=False, init=False)
    _pending_release: bool = field(default=False, init=False)
    _pending_delta: Vector2D = field(default=(0.0, 0.0), init=False)

    _now: float = field(default=0.0, init=False)
    _pressed: bool = field(default=False, init=False)
    _released: bool = field(default=False, init=False)
    _delta: Vector2D = field(default=(0.0, 0.0), init=False)
    _hover_key: object = field(default=None, init=False)
    _tick_claim: object = field(default=None, init=False)

    _last_click_key: object = field(default=None, init=False)
    _last_click_time: float = field(default=0.0, init=False)

    def move(self, x: float, y: float) -> None:
        """
        Pointer moved to ``(x, y)`` in screen space.
        """
        new_pos = (float(x), float(y))
        if self._down and self._press_pos is not None:
            if not self._moved:
                if euclidean_distance(self._press_pos, new_pos) > self.drag_threshold_px:
                    self._moved = True
                    self._add_delta(self._press_pos, new_pos)
            elif self._pos is not None:
                self._add_delta(self._pos, new_pos)
        self._pos = new_pos

    def press(self, x: float, y: float) -> None:
        """
        Primary button pressed at ``(x, y)``.
        """
        self._pos = (float(x), float(y))
        self._down = True
        self._press_pos = self._pos
        self._press_key = None
        self._moved = False
        self._pending_press = True
        self._pending_delta = (0.0, 0.0)

    def release(self, x: float, y: float) -> None:
        """
        Primary button released at ``(x, y)``.
        """
        self.move(x, y)
        if self._down:
            self._down = False
            self._pending_release = True

    def begin_tick(self, now: float) -> None:
        """
        Start a redraw tick at time ``now`` (seconds), latching pending events.
        """
        if self._pressed and self._tick_claim != self._last_click_key:
            # A press anywhere else ends a pending double click.
            self._last_click_key = None
        self._tick_claim = None

        if not self._pending_press:
            if self._pressed and self._press_key is None:
                self._press_key = _NO_TARGET
            if self._released:
                self._press_pos = None
                self._press_key = None
                self._moved = False

        self._now = now
        self._pressed = self._pending_press
        self._released = self._pending_release
        self._delta = self._pending_delta
        self._pending_press = False
        self._pending_release = False
        self._pending_delta = (0.0, 0.0)
        self._hover_key = None

    def interact(self, region: ScreenRect, key: Hashable, sense: Sense) -> Response:
        """
        Report what the pointer did to ``region`` during the current tick.
        """
        if (
            self._pressed
            and self._press_key is None
            and self._press_pos is not None
            and region.contains(self._press_pos)
        ):
            self._press_key = key
            self._tick_claim = key

        owns_press = self._press_key is not None and self._press_key is not _NO_TARGET and self._press_key == key
        dragging = self._moved and (self._down or self._released)
        response = Response(key=key)

        if Sense.DRAG in sense and owns_press and dragging:
            response.dragged = True
            response.drag_delta = self._delta

        other_is_dragging = dragging and not owns_press and self._press_key is not _NO_TARGET
        if response.dragged:
            response.hovered = True
        elif (
            self._pos is not None
            and region.contains(self._pos)
            and self._hover_key is None
            and not other_is_dragging
        ):
            self._hover_key = key
            response.hovered = True

        if Sense.CLICK in sense and owns_press and self._released and not self._moved:
            response.clicked = True
            if self._last_click_key == key and self._now - self._last_click_time <= self.double_click_s:
                response.double_clicked = True
                self._last_click_key = None
            else:
                self._last_click_key = key
                self._last_click_time = self._now

        return response

    def _add_delta(self, start: ScreenPoint, end: ScreenPoint) -> None:
        dx, dy = self._pending_delta
        self._pending_delta = (dx + end[0] - start[0], dy + end[1] - start[1])


@dataclass
class ControlPointFeedback:
    """
    Presentation data for one shown control point after this tick's input.

    Attributes:
        index: Control point index, 0 for the main point.
        key: Interaction key of the point.
        screen_pos: Current position in screen space.
        state: Idle, hovered, or dragging.
        target_radius: Radius the renderer should ease toward.
    """

    index: int
    key: Hashable
    screen_pos: ScreenPoint
    state: InteractionState
    target_radius: float


@dataclass
class MarkerInteraction:
    """
    What happened to one marker during one tick.
    """

    activated: bool = False
    toggled: bool = False
    moved: bool = False
    points: List[ControlPointFeedback] = field(default_factory=list)


@dataclass
class FrameInteraction:
    """
    Outcome of one tick of editing over a whole frame.

    Attributes:
        activated_index: Index of the marker that became active, if any.
        markers: Per-marker outcome, in frame order.
    """

    activated_index: Optional[int]
    markers: List[MarkerInteraction]


def target_radius(state: InteractionState, radii: Radii) -> float:
    idle, hovered, dragging = radii
    if state is InteractionState.DRAGGING:
        return dragging
    if state is InteractionState.HOVERED:
        return hovered
    return idle


def hit_region(center: ScreenPoint, radius: float, scale: float) -> ScreenRect:
    """
    Square hit region whose half extent is ``scale * radius``.
    """
    return ScreenRect.from_center_size(center, 2.0 * scale * radius)


def interact_marker(
    marker: Marker,
    pointer: PointerInput,
    rect: ScreenRect,
    config: Config = DEFAULT_CONFIG,
) -> MarkerInteraction:
    """
    Run one tick of hit-testing and editing for a single marker.

    The main point is always clickable; it is draggable only while the marker
    is active. Control points 1-3 are shown and draggable only on the active
    curved marker.
    """
    result = MarkerInteraction()

    main_screen = to_screen(marker.anchor, rect)
    sense = Sense.CLICK_AND_DRAG if marker.active else Sense.CLICK
    response = pointer.interact(
        hit_region(main_screen, config.primary_radii[0], config.hit_region_scale),
        marker.keys[0],
        sense,
    )
    if response.dragged:
        delta = screen_delta_to_normalized(response.drag_delta, rect)
        result.moved = marker.translate(delta, 0) or result.moved
    if response.double_clicked:
        marker.toggle_path_type(config.curve_offsets)
        result.toggled = True
        result.activated = True
    elif response.clicked:
        result.activated = True
    result.points.append(
        ControlPointFeedback(
            index=0,
            key=marker.keys[0],
            screen_pos=to_screen(marker.anchor, rect),
            state=response.state,
            target_radius=target_radius(response.state, config.primary_radii),
        )
    )

    if marker.active and marker.is_curve:
        for idx in range(1, 4):
            screen_pt = to_screen(marker.control_points()[idx], rect)
            response = pointer.interact(
                hit_region(screen_pt, config.secondary_radii[0], config.hit_region_scale),
                marker.keys[idx],
                Sense.CLICK_AND_DRAG,
            )
            if response.dragged:
                delta = screen_delta_to_normalized(response.drag_delta, rect)
                result.moved = marker.translate(delta, idx) or result.moved
            result.points.append(
                ControlPointFeedback(
                    index=idx,
                    key=marker.keys[idx],
                    screen_pos=to_screen(marker.control_points()[idx], rect),
                    state=response.state,
                    target_radius=target_radius(response.state, config.secondary_radii),
                )
            )

    return result


def select_exclusive(frame: Sequence[Marker], index: int) -> None:
    """
    Activate ``frame[index]`` and deactivate every other marker.
    """
    if not 0 <= index < len(frame):
        raise IndexError(f"Marker index {index} out of range for {len(frame)} markers.")
    for i, marker in enumerate(frame):
        marker.active = i == index


def interact_frame(
    frame: Sequence[Marker],
    pointer: PointerInput,
    rect: ScreenRect,
    config: Config = DEFAULT_CONFIG,
) -> FrameInteraction:
    """
    Run one editing tick over every marker of a frame, in frame order.

    If a marker signals activation it becomes the only active marker.
    """
    activated_index: Optional[int] = None
    outcomes: List[MarkerInteraction] = []
    for i, marker in enumerate(frame):
        outcome = interact_marker(marker, pointer, rect, config)
        if outcome.activated and activated_index is None:
            activated_index = i
        outcomes.append(outcome)

    if activated_index is not None:
        select_exclusive(frame, activated_index)

    return FrameInteraction(activated_index=activated_index, markers=outcomes)
