"""
Configuration utilities for the handball move editor.

This module centralizes configurable parameters such as:
- Paths for the persisted animation state and exported files.
- Marker radii, hit-test scale, and easing durations.
- Pointer thresholds for telling clicks, drags, and double clicks apart.
- Playback speed and video export settings.

The default `Config` dataclass can be overridden from ``config.yaml`` or the
command line; see :mod:`move_editor.main`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from .marker import DEFAULT_CURVE_OFFSETS

# Target radii in pixels for (idle, hovered, dragging).
Radii = Tuple[float, float, float]


@dataclass
class Config:
    """
    High-level configuration for one editing session or export.

    Attributes:
        state_file: JSON file the editor loads on start and saves on quit.
        output_dir: Directory where rendered videos and CSV exports are stored.
        window_name: Title of the OpenCV editor window.
        canvas_size: (width, height) of the editor canvas in pixels.
        header_height: Pixels reserved above the field for buttons and status.
        primary_radii: Radii of a marker's main point (idle, hover, drag).
        secondary_radii: Radii of curve control points 1-3 (idle, hover, drag).
        hit_region_scale: Hit region half extent as a multiple of the radius.
        radius_ease_s: Seconds for a radius to reach its new target.
        curve_offsets: Offsets of control points 1-3 when a marker becomes a curve.
        seconds_per_step: Playback duration of one keyframe.
        drag_threshold_px: Pointer travel that turns a press into a drag.
        double_click_s: Maximum gap between two clicks of a double click.
        video_fps: Frame rate of rendered videos.
        video_codec: FourCC codec string for rendered videos.
        dark_mode: Start the editor with the dark theme.
        show_free_throw_line: Also draw the nine-metre line.
        csv_samples_per_step: Samples per keyframe in trajectory CSV exports.
    """

    state_file: Path = Path("outputs") / "animation.json"
    output_dir: Path = Path("outputs")
    window_name: str = "Handball move editor"

    canvas_size: Tuple[int, int] = (720, 820)
    header_height: int = 100

    primary_radii: Radii = (10.0, 11.0, 13.0)
    secondary_radii: Radii = (5.0, 6.0, 7.0)
    hit_region_scale: float = 1.7
    radius_ease_s: float = 0.1
    curve_offsets: Tuple[Tuple[float, float], ...] = DEFAULT_CURVE_OFFSETS

    seconds_per_step: float = 1.0
    drag_threshold_px: float = 5.0
    double_click_s: float = 0.3

    video_fps: float = 30.0
    video_codec: str = "mp4v"

    dark_mode: bool = True
    show_free_throw_line: bool = False

    csv_samples_per_step: int = 10

    def ensure_output_dirs(self) -> None:
        """
        Create output directories if they do not exist.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.state_file.parent.mkdir(parents=True, exist_ok=True)

    @property
    def videos_dir(self) -> Path:
        """
        Directory for rendered playback videos.
        """
        path = self.output_dir / "videos"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def exports_dir(self) -> Path:
        """
        Directory for trajectory CSV exports.
        """
        path = self.output_dir / "exports"
        path.mkdir(parents=True, exist_ok=True)
        return path


DEFAULT_CONFIG = Config()
