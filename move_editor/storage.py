"""
Utilities for persisting animations and exporting sampled trajectories.

Animations are stored as JSON: ordered frames of ordered markers, each with its
interaction keys, movement variant and points, label, role, and active flag.
Floats are written with full precision so a save/load cycle is lossless.

Trajectory exports sample every marker's interpolated position over the whole
playback range and write one CSV row per marker per sample.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List

from .animation import Animation, playback_position


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def save_animation(animation: Animation, path: Path | str) -> None:
    """
    Save an animation to JSON at ``path``.
    """
    path = Path(path)
    _ensure_parent(path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(animation.to_dict(), f, indent=2)


def load_animation(path: Path | str) -> Animation:
    """
    Load an animation from a JSON file produced by :func:`save_animation`.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file is not valid JSON or not a valid animation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Animation file {path} not found.")
    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Animation file {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Animation file {path} must contain a top-level mapping.")
    return Animation.from_dict(data)


def sample_trajectories(animation: Animation, samples_per_step: int = 10) -> List[Dict[str, Any]]:
    """
    Sample every marker's position across the whole playback range.

    Returns:
        Rows with keys: time, frame_index, marker_index, label, role, x, y.
        The last sample sits exactly at the end of the final frame.
    """
    if samples_per_step < 1:
        raise ValueError("samples_per_step must be >= 1")
    num_frames = len(animation.frames)
    rows: List[Dict[str, Any]] = []
    for i in range(num_frames * samples_per_step + 1):
        time = i / samples_per_step
        frame_idx, _t = playback_position(time, num_frames)
        positions = animation.positions_at(time)
        for marker_idx, (marker, (x, y)) in enumerate(zip(animation.frames[frame_idx], positions)):
            rows.append(
                {
                    "time": time,
                    "frame_index": frame_idx,
                    "marker_index": marker_idx,
                    "label": marker.label,
                    "role": marker.role.value,
                    "x": x,
                    "y": y,
                }
            )
    return rows


def export_trajectories_csv(
    animation: Animation,
    path: Path | str,
    samples_per_step: int = 10,
) -> int:
    """
    Write sampled trajectories to CSV. Returns the number of rows written.
    """
    path = Path(path)
    _ensure_parent(path)
    rows = sample_trajectories(animation, samples_per_step)
    fieldnames = ["time", "frame_index", "marker_index", "label", "role", "x", "y"]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)
    return len(rows)
