"""
Geometry helper functions for coordinate transforms and distances.

This module maps between the normalized field space used by the model and the
pixel rectangle the field is drawn into. Drag deltas are converted back into
normalized deltas so that dragging feels linear at any render size.

All functions are pure. A degenerate rectangle (zero width or height) is the
caller's responsibility; results are undefined in that case.
"""

from __future__ import annotations

import numpy as np

from ..data_structures import NormalizedPoint, ScreenPoint, ScreenRect, Vector2D


def to_screen(point: NormalizedPoint, rect: ScreenRect) -> ScreenPoint:
    """
    Map a normalized point into the pixel rectangle ``rect``.
    """
    x, y = point
    return rect.min_x + rect.width * x, rect.min_y + rect.height * y


def to_normalized(point: ScreenPoint, rect: ScreenRect) -> NormalizedPoint:
    """
    Inverse of :func:`to_screen`.
    """
    u, v = point
    return (u - rect.min_x) / rect.width, (v - rect.min_y) / rect.height


def screen_delta_to_normalized(delta: Vector2D, rect: ScreenRect) -> Vector2D:
    """
    Convert a pixel delta (e.g. pointer drag motion) into a normalized delta.
    """
    dx, dy = delta
    return dx / rect.width, dy / rect.height


def screen_length(length: float, rect: ScreenRect) -> float:
    """
    Scale a normalized length to pixels using the rectangle width as reference.
    """
    return length * rect.width


def euclidean_distance(a: ScreenPoint, b: ScreenPoint) -> float:
    """
    Compute Euclidean distance between two 2D points.
    """
    ax, ay = a
    bx, by = b
    return float(np.hypot(ax - bx, ay - by))
