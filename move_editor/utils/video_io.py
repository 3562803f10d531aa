"""
Video output for offline playback rendering.

Frames come from :func:`move_editor.visualization.render_playback` as BGR
``uint8`` canvases and are streamed straight into OpenCV's writer.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Tuple

import cv2
import numpy as np

Frame = np.ndarray[Any, np.dtype[np.uint8]]


def write_video(
    path: Path,
    frames: Iterable[Frame],
    fps: float,
    frame_size: Tuple[int, int],
    codec: str = "mp4v",
) -> int:
    """
    Encode ``frames`` into a video file at ``path``.

    Args:
        path: Output file; parent directories are created.
        frames: BGR canvases of exactly ``frame_size`` (width, height).
        fps: Playback frame rate.
        codec: FourCC codec string, e.g. "mp4v" or "MJPG".

    Returns:
        Number of frames written.

    Raises:
        IOError: If OpenCV cannot open a writer for ``path`` and ``codec``.
        ValueError: If a frame does not match ``frame_size``.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    width, height = frame_size
    fourcc = cv2.VideoWriter_fourcc(*codec)  # type: ignore[attr-defined]
    writer = cv2.VideoWriter(str(path), fourcc, float(fps), (width, height))
    if not writer.isOpened():
        raise IOError(f"Could not open video writer for {path} with codec {codec!r}")

    count = 0
    try:
        for frame in frames:
            h, w = frame.shape[:2]
            if (w, h) != (width, height):
                raise ValueError(f"Frame {count} is {w}x{h}, expected {width}x{height}.")
            writer.write(frame)
            count += 1
    finally:
        writer.release()
    return count
