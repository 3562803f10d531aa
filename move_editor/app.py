"""
Interactive OpenCV editor window.

The window shows a header with clickable buttons and the field below it. Each
redraw tick latches pointer events, runs the header buttons and the field
through the same :class:`PointerTracker`, and draws onto a fresh canvas.

Controls:
    [Mouse] Click marker          -> Select it for editing
    [Mouse] Double-click marker   -> Toggle fixed / curved movement
    [Mouse] Drag selected marker  -> Move its whole path
    [Mouse] Drag control point    -> Reshape the selected curve
    [Space]                       -> Animate from the first step
    [R]                           -> Reset to editing
    [N]                           -> Add step
    [1]-[9]                       -> Select step
    [T]                           -> Toggle light / dark theme
    [Q] or [Esc]                  -> Quit
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, List, Optional

import cv2

from .animation import Animation
from .animator import ValueAnimator
from .config import DEFAULT_CONFIG, Config
from .data_structures import ScreenRect
from .interaction import InteractionState, PointerTracker, Response, Sense
from .visualization import (
    DARK_THEME,
    LIGHT_THEME,
    CvPainter,
    DisplayContext,
    Frame,
    Painter,
    Stroke,
    TextStyle,
    Theme,
    field_rect_for_canvas,
    new_canvas,
)

PLAYBACK_KEY = "playback"
# Keeps the playback target inside the last frame.
PLAYBACK_EPS = 1e-6

_BUTTON_HEIGHT = 28
_BUTTON_GAP = 6


@dataclass
class Button:
    key: str
    label: str
    rect: ScreenRect
    highlighted: bool = False


class EditorApp:
    """
    Editing and playback loop around one :class:`Animation`.

    Args:
        animation: The move being edited; mutated in place.
        config: Window, radii, and timing settings.
        clock: Time source in seconds.
    """

    def __init__(
        self,
        animation: Animation,
        config: Config = DEFAULT_CONFIG,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.animation = animation
        self.config = config
        self.pointer = PointerTracker(
            drag_threshold_px=config.drag_threshold_px,
            double_click_s=config.double_click_s,
        )
        self.animator = ValueAnimator()
        self.is_animating = False
        self.dark_mode = config.dark_mode
        self.status = ""
        self._clock = clock

    @property
    def theme(self) -> Theme:
        return DARK_THEME if self.dark_mode else LIGHT_THEME

    @property
    def field_rect(self) -> ScreenRect:
        return field_rect_for_canvas(self.config.canvas_size, self.config.header_height)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start_animation(self, now: float) -> None:
        self.is_animating = True
        self.animator.animate(PLAYBACK_KEY, 0.0, 0.0, now)

    def stop_animation(self) -> None:
        self.is_animating = False

    def _forget_radii(self) -> None:
        # Radius transitions only live while their frame is shown.
        for marker in self.animation.current:
            for key in marker.keys:
                self.animator.forget(key)

    def add_step(self) -> None:
        self._forget_radii()
        self.animation.append_frame()
        self.is_animating = False
        self.status = f"Added step {len(self.animation.frames)}"

    def select_step(self, index: int) -> None:
        if index != self.animation.cur_frame:
            self._forget_radii()
        self.animation.set_current_frame(index)
        self.is_animating = False

    def toggle_theme(self) -> None:
        self.dark_mode = not self.dark_mode

    def playback_time(self, now: float) -> float:
        """
        Playback clock in steps; runs from 0 to the end over the whole move.
        """
        num_steps = len(self.animation.frames)
        return self.animator.animate(
            PLAYBACK_KEY,
            num_steps - PLAYBACK_EPS,
            num_steps * self.config.seconds_per_step,
            now,
        )

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def on_mouse(self, event: int, x: int, y: int, flags: int, _param: object) -> None:
        """
        OpenCV mouse callback forwarding events to the pointer tracker.
        """
        if event == cv2.EVENT_MOUSEMOVE:
            self.pointer.move(x, y)
        elif event in (cv2.EVENT_LBUTTONDOWN, cv2.EVENT_LBUTTONDBLCLK):
            self.pointer.press(x, y)
        elif event == cv2.EVENT_LBUTTONUP:
            self.pointer.release(x, y)

    def handle_key(self, key: int, now: float) -> bool:
        """
        Apply a keyboard shortcut. Returns False when the editor should quit.
        """
        if key in (ord("q"), ord("Q"), 27):
            return False
        if key == ord(" "):
            self.start_animation(now)
        elif key in (ord("r"), ord("R")):
            self.stop_animation()
        elif key in (ord("n"), ord("N")):
            self.add_step()
        elif key in (ord("t"), ord("T")):
            self.toggle_theme()
        elif ord("1") <= key <= ord("9"):
            self.select_step(key - ord("1"))
        return True

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def layout_buttons(self) -> List[Button]:
        """
        Header buttons: playback controls on the first row, steps on the second.
        """
        buttons: List[Button] = []
        x, y = 10.0, 10.0
        for key, label, width, highlighted in (
            ("animate", "Animate", 90.0, self.is_animating),
            ("reset", "Reset", 70.0, False),
            ("theme", "Light" if self.dark_mode else "Dark", 70.0, False),
        ):
            buttons.append(Button(key, label, ScreenRect(x, y, x + width, y + _BUTTON_HEIGHT), highlighted))
            x += width + _BUTTON_GAP

        x, y = 10.0, 10.0 + _BUTTON_HEIGHT + _BUTTON_GAP
        for i in range(len(self.animation.frames)):
            current = i == self.animation.cur_frame and not self.is_animating
            buttons.append(
                Button(f"step:{i}", str(i + 1), ScreenRect(x, y, x + 32.0, y + _BUTTON_HEIGHT), current)
            )
            x += 32.0 + _BUTTON_GAP
        buttons.append(Button("add_step", "Add step", ScreenRect(x, y, x + 90.0, y + _BUTTON_HEIGHT)))
        return buttons

    def _draw_button(self, painter: Painter, button: Button, response: Response) -> None:
        theme = self.theme
        fill = theme.button_active if button.highlighted else theme.button
        outline = Stroke(2 if response.state is InteractionState.HOVERED else 1, theme.handle)
        painter.draw_rect(button.rect, stroke=outline, fill=fill)
        painter.draw_text(button.rect.center, button.label, TextStyle(color=theme.text, scale=0.45))

    def _on_button(self, key: str, now: float) -> None:
        if key == "animate":
            self.start_animation(now)
        elif key == "reset":
            self.stop_animation()
        elif key == "theme":
            self.toggle_theme()
        elif key == "add_step":
            self.add_step()
        elif key.startswith("step:"):
            self.select_step(int(key.split(":", 1)[1]))

    def render(self, now: float) -> Frame:
        """
        Run one redraw tick at time ``now`` and return the drawn canvas.
        """
        self.pointer.begin_tick(now)
        canvas = new_canvas(self.config.canvas_size, self.theme)
        painter = CvPainter(canvas)

        for button in self.layout_buttons():
            response = self.pointer.interact(button.rect, button.key, Sense.CLICK)
            self._draw_button(painter, button, response)
            if response.clicked:
                self._on_button(button.key, now)

        playback_time = self.playback_time(now)
        mode = "Playing" if self.is_animating else f"Editing step {self.animation.cur_frame + 1}"
        painter.draw_text(
            (10.0, self.config.header_height - 10.0),
            f"{mode} of {len(self.animation.frames)}   {self.status}",
            TextStyle(color=self.theme.text, scale=0.45, centered=False),
        )

        ctx = DisplayContext(
            painter=painter,
            pointer=self.pointer,
            animator=self.animator,
            now=now,
            config=self.config,
            theme=self.theme,
        )
        activated = self.animation.display(
            ctx,
            self.field_rect,
            playback_time if self.is_animating else None,
        )
        if activated is not None:
            marker = self.animation.current[activated]
            self.status = f"Selected {marker.label or marker.role.value}"
        return canvas

    def run(self) -> None:
        """
        Open the window and loop until the user quits or closes it.
        """
        name = self.config.window_name
        cv2.namedWindow(name)
        cv2.setMouseCallback(name, self.on_mouse)
        print("[*] Controls: click select | double-click toggle curve | drag move")
        print("    Space animate | R reset | N add step | 1-9 select step | T theme | Q quit")
        try:
            while True:
                cv2.imshow(name, self.render(self._clock()))
                key = cv2.waitKey(16)
                if key >= 0 and not self.handle_key(key & 0xFF, self._clock()):
                    break
                if cv2.getWindowProperty(name, cv2.WND_PROP_VISIBLE) < 1:
                    break
        finally:
            cv2.destroyAllWindows()


def run_app(animation: Animation, config: Optional[Config] = None) -> Animation:
    """
    Run the editor window and return the edited animation.
    """
    app = EditorApp(animation, config or DEFAULT_CONFIG)
    app.run()
    return app.animation
