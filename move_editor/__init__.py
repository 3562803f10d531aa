"""
Top-level package for the handball move editor.

This package provides a small keyframe animation toolkit for:
- Placing offense, defense, and ball markers on a handball field.
- Shaping each marker's movement with cubic Bezier paths.
- Appending keyframes that continue the previous movement smoothly.
- Editing control points directly on screen with click and drag.
- Playing back, exporting, and persisting the resulting move.

The model lives in normalized field coordinates; see :mod:`move_editor.utils.geometry`
for the mapping to pixels and :mod:`move_editor.app` for the OpenCV editor window.
"""
