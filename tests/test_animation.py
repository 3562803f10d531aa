"""Keyframe sequence: frame derivation, selection, playback positions."""

import pytest

from move_editor.animation import (
    DEFAULT_LINEUP,
    Animation,
    default_animation,
    playback_position,
)
from move_editor.data_structures import Curve, Fixed, Role
from move_editor.marker import IdentitySequence, Marker


def _single(movement, role=Role.ATTACKING):
    return Animation.from_lineup([(movement, "CB", role)])


class TestPlaybackPosition:
    @pytest.mark.parametrize(
        "time, expected",
        [
            (0.0, (0, 0.0)),
            (0.25, (0, 0.25)),
            (1.5, (1, 0.5)),
            (2.999, (2, 0.999)),
        ],
    )
    def test_splits_time(self, time, expected):
        idx, t = playback_position(time, 3)
        assert idx == expected[0]
        assert t == pytest.approx(expected[1])

    def test_clamps_past_end(self):
        assert playback_position(3.0, 3) == (2, 1.0)
        assert playback_position(17.2, 3) == (2, 1.0)

    def test_clamps_negative(self):
        assert playback_position(-0.5, 3) == (0, 0.0)

    def test_requires_frames(self):
        with pytest.raises(ValueError):
            playback_position(0.0, 0)


class TestConstruction:
    def test_default_lineup(self):
        animation = default_animation()
        assert len(animation.frames) == 1
        assert animation.cur_frame == 0
        assert len(animation.current) == len(DEFAULT_LINEUP)
        assert [m.role for m in animation.current].count(Role.BALL) == 1
        assert not any(m.active for m in animation.current)

    def test_empty_frames_rejected(self):
        with pytest.raises(ValueError):
            Animation(frames=[])

    def test_cur_frame_out_of_range_rejected(self):
        ids = IdentitySequence()
        frame = [Marker.create(Fixed((0.5, 0.5)), "CB", Role.ATTACKING, ids)]
        with pytest.raises(ValueError):
            Animation(frames=[frame], cur_frame=1)

    def test_loaded_keys_are_reserved(self):
        frame = [Marker((40, 41, 42, 43), Fixed((0.5, 0.5)), "CB", Role.ATTACKING)]
        animation = Animation(frames=[frame])
        animation.append_frame()
        assert min(animation.current[0].keys) > 43

    def test_reused_keys_rejected(self):
        a = Marker((1, 2, 3, 4), Fixed((0.1, 0.1)), "LW", Role.ATTACKING)
        b = Marker((4, 5, 6, 7), Fixed((0.2, 0.2)), "LB", Role.ATTACKING)
        with pytest.raises(ValueError):
            Animation(frames=[[a, b]])

    def test_reused_keys_across_frames_rejected(self):
        a = Marker((1, 2, 3, 4), Fixed((0.1, 0.1)), "LW", Role.ATTACKING)
        b = Marker((1, 2, 3, 4), Fixed((0.1, 0.1)), "LW", Role.ATTACKING)
        with pytest.raises(ValueError):
            Animation(frames=[[a], [b]])

    def test_only_first_active_marker_survives(self):
        ids = IdentitySequence()
        frame = [Marker.create(Fixed((0.1 * i, 0.1)), "P", Role.ATTACKING, ids) for i in range(3)]
        frame[1].active = True
        frame[2].active = True
        animation = Animation(frames=[frame])
        assert [m.active for m in animation.current] == [False, True, False]


class TestAppendFrame:
    def test_curve_then_derive(self):
        animation = _single(Fixed((0.1, 0.1)))
        marker = animation.current[0]
        marker.toggle_path_type()
        marker.active = True
        marker.movement = Curve(((0.1, 0.1), (0.2, 0.1), (0.2, 0.2), (0.3, 0.3)))

        new_frame = animation.append_frame()

        assert len(animation.frames) == 2
        assert animation.cur_frame == 1
        derived = new_frame[0].movement
        assert isinstance(derived, Curve)
        assert derived.points[0] == pytest.approx((0.3, 0.3))
        moved = (
            derived.points[3][0] - derived.points[0][0],
            derived.points[3][1] - derived.points[0][1],
        )
        assert moved == pytest.approx((0.2, 0.2))

    def test_preserves_count_labels_and_roles(self):
        animation = default_animation()
        animation.append_frame()
        animation.append_frame()
        assert len(animation.frames) == 3
        assert animation.is_consistent()
        assert [m.label for m in animation.frames[2]] == [m.label for m in animation.frames[0]]

    def test_keys_unique_across_frames(self):
        animation = default_animation()
        for _ in range(3):
            animation.append_frame()
        keys = [k for frame in animation.frames for m in frame for k in m.keys]
        assert len(keys) == len(set(keys))

    def test_derives_from_last_frame_not_current(self):
        animation = _single(Fixed((0.2, 0.2)))
        animation.append_frame()
        last = animation.current[0]
        last.active = True
        last.translate((0.1, 0.0))
        animation.set_current_frame(0)
        new_frame = animation.append_frame()
        assert new_frame[0].movement.point == pytest.approx((0.3, 0.2))
        assert animation.cur_frame == 2

    def test_derived_markers_start_inactive(self):
        animation = _single(Fixed((0.2, 0.2)))
        animation.current[0].active = True
        new_frame = animation.append_frame()
        assert new_frame[0].active is False


class TestSetCurrentFrame:
    def test_clamps(self):
        animation = default_animation()
        animation.append_frame()
        assert animation.set_current_frame(5) == 1
        assert animation.set_current_frame(-2) == 0
        assert animation.cur_frame == 0


class TestPositionsAt:
    def test_interpolates_current_step(self):
        animation = _single(Fixed((0.0, 0.0)))
        marker = animation.current[0]
        marker.movement = Curve(((0.0, 0.0), (0.0, 0.0), (1.0, 0.0), (1.0, 0.0)))
        animation.append_frame()

        assert animation.positions_at(0.0)[0] == (0.0, 0.0)
        assert animation.positions_at(0.5)[0] == pytest.approx((0.5, 0.0))
        assert animation.positions_at(1.0)[0] == pytest.approx((1.0, 0.0))

    def test_end_shows_final_position(self):
        animation = _single(Fixed((0.0, 0.0)))
        animation.current[0].movement = Curve(((0.0, 0.0), (0.1, 0.0), (0.2, 0.0), (0.3, 0.0)))
        animation.append_frame()
        final = animation.frames[-1][0].movement.points[3]
        assert animation.positions_at(2.0)[0] == final
        assert animation.positions_at(99.0)[0] == final


class TestConsistency:
    def test_detects_mismatch(self):
        animation = default_animation()
        animation.append_frame()
        animation.frames[1].pop()
        assert not animation.is_consistent()


class TestSerialization:
    def test_round_trip(self):
        animation = default_animation()
        animation.current[2].toggle_path_type()
        animation.append_frame()
        restored = Animation.from_dict(animation.to_dict())
        assert restored.frames == animation.frames
        assert restored.cur_frame == animation.cur_frame
        assert restored.ids.next_key == animation.ids.next_key

    def test_future_version_rejected(self):
        data = default_animation().to_dict()
        data["version"] = 99
        with pytest.raises(ValueError):
            Animation.from_dict(data)

    def test_missing_frames_rejected(self):
        with pytest.raises(ValueError):
            Animation.from_dict({"version": 1})

    @pytest.mark.parametrize(
        "payload",
        [
            {"frames": [5]},
            {"frames": [[7]]},
            {"frames": [[]], "cur_frame": None},
            {"frames": [[]], "next_key": "many"},
        ],
    )
    def test_malformed_payload_raises_value_error(self, payload):
        with pytest.raises(ValueError):
            Animation.from_dict(payload)

    def test_extra_active_markers_cleared_on_load(self):
        animation = default_animation()
        animation.current[0].active = True
        data = animation.to_dict()
        data["frames"][0][3]["active"] = True
        restored = Animation.from_dict(data)
        assert [m.active for m in restored.current].count(True) == 1
        assert restored.current[0].active
