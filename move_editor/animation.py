"""
Frame sequence: the ordered keyframes of a move and their playback.

An :class:`Animation` starts with a single seed frame and grows one frame at a
time through :meth:`Animation.append_frame`, which derives every marker of the
new frame from the last one (curves continue, fixed markers stay put).

Playback time is a continuous value measured in steps: its integer part picks
the frame and its fractional part is the Bezier parameter for every marker of
that frame. Times past the end clamp to the end of the last frame.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, cast

from .data_structures import Fixed, Movement, NormalizedPoint, Role, ScreenRect
from .field import draw_field
from .interaction import interact_frame
from .marker import IdentitySequence, Marker
from .visualization import DisplayContext, draw_editing_marker, draw_playback_marker

Frame = List[Marker]
LineupEntry = Tuple[Movement, str, Role]

SCHEMA_VERSION = 1

# Handball 6 v 6 starting positions plus the ball.
DEFAULT_LINEUP: Tuple[LineupEntry, ...] = (
    (Fixed((0.02, 0.02)), "LW", Role.ATTACKING),
    (Fixed((0.11, 0.56)), "LB", Role.ATTACKING),
    (Fixed((0.50, 0.62)), "CB", Role.ATTACKING),
    (Fixed((0.50, 0.32)), "PV", Role.ATTACKING),
    (Fixed((0.89, 0.56)), "RB", Role.ATTACKING),
    (Fixed((0.98, 0.02)), "RW", Role.ATTACKING),
    (Fixed((0.16, 0.15)), "LW", Role.DEFENDING),
    (Fixed((0.28, 0.28)), "LB", Role.DEFENDING),
    (Fixed((0.43, 0.32)), "CB", Role.DEFENDING),
    (Fixed((0.57, 0.32)), "PV", Role.DEFENDING),
    (Fixed((0.72, 0.28)), "RB", Role.DEFENDING),
    (Fixed((0.84, 0.15)), "RW", Role.DEFENDING),
    (Fixed((0.50, 0.65)), "", Role.BALL),
)


def playback_position(playback_time: float, num_frames: int) -> Tuple[int, float]:
    """
    Split a playback time into ``(frame_index, t)``.

    Times at or past ``num_frames`` clamp to the end of the last frame
    (``t == 1``); negative times clamp to the start of the first frame.
    """
    if num_frames < 1:
        raise ValueError("An animation needs at least one frame.")
    if playback_time < 0.0:
        return 0, 0.0
    if playback_time >= num_frames:
        return num_frames - 1, 1.0
    step = math.floor(playback_time)
    return int(step), playback_time - step


@dataclass
class Animation:
    """
    Ordered keyframes of one move.

    Attributes:
        frames: Keyframes; each is the full list of markers at that step.
        cur_frame: Index of the frame being edited.
        ids: Source of interaction keys for new markers.
    """

    frames: List[Frame]
    cur_frame: int = 0
    ids: IdentitySequence = field(default_factory=IdentitySequence)

    def __post_init__(self) -> None:
        if not self.frames:
            raise ValueError("An animation needs at least one frame.")
        if not 0 <= self.cur_frame < len(self.frames):
            raise ValueError(
                f"cur_frame {self.cur_frame} out of range for {len(self.frames)} frames."
            )
        seen: Set[int] = set()
        for frame in self.frames:
            for marker in frame:
                if seen.intersection(marker.keys) or len(set(marker.keys)) != len(marker.keys):
                    raise ValueError(f"Marker {marker.label!r} reuses an interaction key: {marker.keys}.")
                seen.update(marker.keys)
                self.ids.reserve_past(max(marker.keys))
            # At most one active marker per frame; the earliest one keeps the selection.
            active = [i for i, marker in enumerate(frame) if marker.active]
            for i in active[1:]:
                frame[i].active = False

    @classmethod
    def from_lineup(cls, lineup: Iterable[LineupEntry]) -> "Animation":
        """
        Create an animation whose single seed frame holds ``lineup``.
        """
        ids = IdentitySequence()
        seed = [Marker.create(movement, label, role, ids) for movement, label, role in lineup]
        return cls(frames=[seed], cur_frame=0, ids=ids)

    @property
    def current(self) -> Frame:
        return self.frames[self.cur_frame]

    def append_frame(self) -> Frame:
        """
        Append a frame derived from the last one and make it current.
        """
        new_frame = [marker.derive_next(self.ids) for marker in self.frames[-1]]
        self.frames.append(new_frame)
        self.cur_frame = len(self.frames) - 1
        return new_frame

    def set_current_frame(self, index: int) -> int:
        """
        Select the frame to edit; out of range indices clamp to the valid range.
        """
        self.cur_frame = min(max(int(index), 0), len(self.frames) - 1)
        return self.cur_frame

    def positions_at(self, playback_time: float) -> List[NormalizedPoint]:
        """
        Interpolated marker positions at ``playback_time`` (in steps).
        """
        frame_idx, t = playback_position(playback_time, len(self.frames))
        return [marker.evaluated_position(t) for marker in self.frames[frame_idx]]

    def is_consistent(self) -> bool:
        """
        True when every frame holds the same markers (count, labels, roles) in order.
        """
        signature = [(m.label, m.role) for m in self.frames[0]]
        return all([(m.label, m.role) for m in frame] == signature for frame in self.frames)

    def display(
        self,
        ctx: DisplayContext,
        rect: ScreenRect,
        playback_time: Optional[float] = None,
    ) -> Optional[int]:
        """
        Draw the field and markers into ``rect``.

        Without ``playback_time`` the current frame is editable: pointer input
        is applied and the index of the marker that became active (if any) is
        returned. With ``playback_time`` a read-only interpolated snapshot is
        drawn and None is returned.
        """
        if not ctx.painter.is_region_visible(rect):
            return None

        draw_field(ctx.painter, rect, ctx.theme, ctx.config.show_free_throw_line)

        if playback_time is None:
            frame = self.current
            outcome = interact_frame(frame, ctx.pointer, rect, ctx.config)
            for marker, interaction in zip(frame, outcome.markers):
                draw_editing_marker(ctx, marker, interaction, rect)
            return outcome.activated_index

        frame_idx, t = playback_position(playback_time, len(self.frames))
        for marker in self.frames[frame_idx]:
            draw_playback_marker(
                ctx.painter,
                marker,
                marker.evaluated_position(t),
                rect,
                ctx.config,
                ctx.theme,
            )
        return None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a JSON-serializable dictionary.
        """
        return {
            "version": SCHEMA_VERSION,
            "cur_frame": self.cur_frame,
            "next_key": self.ids.next_key,
            "frames": [[marker.to_dict() for marker in frame] for frame in self.frames],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Animation":
        """
        Construct an animation from a mapping produced by :meth:`to_dict`.
        """
        try:
            version = int(data.get("version", SCHEMA_VERSION))
            cur_frame = int(data.get("cur_frame", 0))
            next_key = int(data.get("next_key", 1))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Malformed animation header: {exc}") from exc
        if version > SCHEMA_VERSION:
            raise ValueError(f"Unsupported animation schema version {version}.")

        frames_raw = data.get("frames")
        if not isinstance(frames_raw, list):
            raise ValueError("Animation payload needs a 'frames' list.")
        frames: List[Frame] = []
        for idx, frame in enumerate(frames_raw):
            if not isinstance(frame, list):
                raise ValueError(f"Frame {idx} must be a list of markers.")
            entries = cast(Sequence[Any], frame)
            if not all(isinstance(entry, Mapping) for entry in entries):
                raise ValueError(f"Frame {idx} holds a marker entry that is not a mapping.")
            frames.append([Marker.from_dict(entry) for entry in entries])
        return cls(frames=frames, cur_frame=cur_frame, ids=IdentitySequence(next_key=next_key))


def default_animation() -> Animation:
    """
    Fresh animation seeded with :data:`DEFAULT_LINEUP`.
    """
    return Animation.from_lineup(DEFAULT_LINEUP)
