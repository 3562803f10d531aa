"""Marker model: creation, derivation, path toggling, translation, evaluation."""

import pytest

from move_editor.data_structures import Curve, Fixed, Role
from move_editor.marker import (
    DEFAULT_CURVE_OFFSETS,
    ControlPointError,
    IdentitySequence,
    Marker,
)

CURVE_PTS = ((0.1, 0.1), (0.2, 0.1), (0.2, 0.2), (0.3, 0.3))


def _marker(movement, active=False, ids=None):
    marker = Marker.create(movement, "CB", Role.ATTACKING, ids or IdentitySequence())
    marker.active = active
    return marker


class TestIdentitySequence:
    def test_keys_are_unique_and_monotonic(self):
        ids = IdentitySequence()
        a, b = ids.take(), ids.take()
        assert a == (1, 2, 3, 4)
        assert b == (5, 6, 7, 8)

    def test_reserve_past(self):
        ids = IdentitySequence()
        ids.reserve_past(41)
        assert ids.take()[0] == 42
        ids.reserve_past(3)
        assert ids.take()[0] == 46


class TestCreate:
    def test_defaults(self):
        marker = _marker(Fixed((0.5, 0.5)))
        assert marker.active is False
        assert marker.label == "CB"
        assert marker.role is Role.ATTACKING
        assert marker.control_points() == ((0.5, 0.5),)

    def test_markers_never_share_keys(self):
        ids = IdentitySequence()
        markers = [_marker(Fixed((0.1 * i, 0.1)), ids=ids) for i in range(5)]
        keys = [k for m in markers for k in m.keys]
        assert len(keys) == len(set(keys))

    def test_curve_needs_four_points(self):
        with pytest.raises(ValueError):
            Curve(CURVE_PTS[:3])


class TestDeriveNext:
    def test_fixed_stays_put(self):
        ids = IdentitySequence()
        marker = _marker(Fixed((0.4, 0.7)), ids=ids)
        nxt = marker.derive_next(ids)
        assert nxt.movement == Fixed((0.4, 0.7))
        assert nxt.label == marker.label
        assert nxt.role is marker.role
        assert set(nxt.keys).isdisjoint(marker.keys)

    def test_curve_continues(self):
        ids = IdentitySequence()
        marker = _marker(Curve(CURVE_PTS), active=True, ids=ids)
        nxt = marker.derive_next(ids)
        assert isinstance(nxt.movement, Curve)
        assert nxt.movement.points[0] == (0.3, 0.3)
        assert nxt.active is False

    def test_derived_marker_is_independent(self):
        ids = IdentitySequence()
        marker = _marker(Curve(CURVE_PTS), active=True, ids=ids)
        nxt = marker.derive_next(ids)
        marker.translate((0.1, 0.1), 0)
        assert nxt.movement.points[0] == (0.3, 0.3)


class TestTogglePathType:
    def test_fixed_to_curve_uses_offsets(self):
        marker = _marker(Fixed((0.5, 0.5)))
        marker.toggle_path_type()
        assert isinstance(marker.movement, Curve)
        pts = marker.movement.points
        assert pts[0] == (0.5, 0.5)
        for p, (dx, dy) in zip(pts[1:], DEFAULT_CURVE_OFFSETS):
            assert p == pytest.approx((0.5 + dx, 0.5 + dy))

    def test_curve_collapses_to_anchor(self):
        marker = _marker(Curve(CURVE_PTS))
        marker.toggle_path_type()
        assert marker.movement == Fixed((0.1, 0.1))

    @pytest.mark.parametrize("p", [(0.0, 0.0), (0.33, 0.77), (1.0, 1.0)])
    def test_toggle_twice_is_identity(self, p):
        marker = _marker(Fixed(p))
        marker.toggle_path_type()
        marker.toggle_path_type()
        assert marker.movement == Fixed(p)


class TestTranslate:
    def test_inactive_marker_never_moves(self):
        marker = _marker(Curve(CURVE_PTS))
        for idx in range(4):
            assert marker.translate((0.1, 0.1), idx) is False
        assert marker.movement == Curve(CURVE_PTS)

    def test_inactive_fixed_marker_ignores_main_drag(self):
        marker = _marker(Fixed((0.5, 0.5)))
        assert marker.translate((0.1, 0.0), 0) is False
        assert marker.movement == Fixed((0.5, 0.5))

    def test_main_point_moves_whole_curve(self):
        marker = _marker(Curve(CURVE_PTS), active=True)
        assert marker.translate((0.1, -0.1), 0) is True
        for moved, orig in zip(marker.movement.points, CURVE_PTS):
            assert moved == pytest.approx((orig[0] + 0.1, orig[1] - 0.1))

    def test_main_point_moves_fixed(self):
        marker = _marker(Fixed((0.5, 0.5)), active=True)
        marker.translate((0.1, 0.2), 0)
        assert marker.movement.point == pytest.approx((0.6, 0.7))

    @pytest.mark.parametrize("idx", [1, 2, 3])
    def test_control_point_moves_alone(self, idx):
        marker = _marker(Curve(CURVE_PTS), active=True)
        marker.translate((0.05, 0.05), idx)
        for i, (moved, orig) in enumerate(zip(marker.movement.points, CURVE_PTS)):
            if i == idx:
                assert moved == pytest.approx((orig[0] + 0.05, orig[1] + 0.05))
            else:
                assert moved == orig

    @pytest.mark.parametrize("idx", [1, 2, 3])
    def test_control_point_on_fixed_raises(self, idx):
        marker = _marker(Fixed((0.5, 0.5)), active=True)
        with pytest.raises(ControlPointError):
            marker.translate((0.1, 0.1), idx)

    @pytest.mark.parametrize("idx", [-1, 4])
    def test_out_of_range_index(self, idx):
        marker = _marker(Curve(CURVE_PTS), active=True)
        with pytest.raises(IndexError):
            marker.translate((0.1, 0.1), idx)


class TestEvaluatedPosition:
    def test_fixed_ignores_t(self):
        marker = _marker(Fixed((0.2, 0.4)))
        assert marker.evaluated_position(0.0) == (0.2, 0.4)
        assert marker.evaluated_position(0.7) == (0.2, 0.4)

    def test_curve_endpoints(self):
        marker = _marker(Curve(CURVE_PTS))
        assert marker.evaluated_position(0.0) == CURVE_PTS[0]
        assert marker.evaluated_position(1.0) == CURVE_PTS[3]


class TestSerialization:
    def test_round_trip(self):
        marker = _marker(Curve(CURVE_PTS), active=True)
        assert Marker.from_dict(marker.to_dict()) == marker

    def test_unknown_kind(self):
        data = _marker(Fixed((0.1, 0.1))).to_dict()
        data["movement"]["kind"] = "spiral"
        with pytest.raises(ValueError):
            Marker.from_dict(data)

    def test_missing_field(self):
        data = _marker(Fixed((0.1, 0.1))).to_dict()
        del data["keys"]
        with pytest.raises(ValueError):
            Marker.from_dict(data)

    def test_bad_role(self):
        data = _marker(Fixed((0.1, 0.1))).to_dict()
        data["role"] = "goalkeeper"
        with pytest.raises(ValueError):
            Marker.from_dict(data)
