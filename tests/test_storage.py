"""JSON persistence and trajectory CSV export."""

import csv
import json

import pytest

from move_editor.animation import Animation, default_animation
from move_editor.data_structures import Curve, Fixed, Role
from move_editor.storage import (
    export_trajectories_csv,
    load_animation,
    sample_trajectories,
    save_animation,
)


def _edited_animation():
    animation = default_animation()
    marker = animation.current[2]
    marker.active = True
    marker.movement = Curve(((0.5, 0.62), (0.55, 0.6), (0.6, 0.5), (0.63, 0.41)))
    animation.append_frame()
    animation.set_current_frame(0)
    return animation


class TestPersistence:
    def test_round_trip(self, tmp_path):
        animation = _edited_animation()
        path = tmp_path / "nested" / "animation.json"
        save_animation(animation, path)
        restored = load_animation(path)
        assert restored.frames == animation.frames
        assert restored.cur_frame == 0
        assert restored.ids.next_key == animation.ids.next_key

    def test_written_schema(self, tmp_path):
        path = tmp_path / "animation.json"
        save_animation(_edited_animation(), path)
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["version"] == 1
        assert len(data["frames"]) == 2
        entry = data["frames"][0][2]
        assert entry["movement"]["kind"] == "curve"
        assert len(entry["movement"]["points"]) == 4
        assert entry["role"] == Role.ATTACKING.value
        assert entry["active"] is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_animation(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError):
            load_animation(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError):
            load_animation(path)

    def test_bad_cur_frame(self, tmp_path):
        data = default_animation().to_dict()
        data["cur_frame"] = 4
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(ValueError):
            load_animation(path)

    @pytest.mark.parametrize(
        "payload",
        [
            {"frames": [5]},
            {"frames": [["LW"]]},
            {"frames": [[]], "cur_frame": None},
        ],
    )
    def test_malformed_payload(self, tmp_path, payload):
        path = tmp_path / "malformed.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        with pytest.raises(ValueError):
            load_animation(path)


class TestTrajectories:
    def test_row_count(self):
        animation = _edited_animation()
        rows = sample_trajectories(animation, samples_per_step=5)
        assert len(rows) == (2 * 5 + 1) * len(animation.current)

    def test_first_and_last_samples(self):
        animation = _edited_animation()
        rows = sample_trajectories(animation, samples_per_step=4)
        cb_rows = [r for r in rows if r["marker_index"] == 2]
        assert cb_rows[0]["time"] == 0.0
        assert (cb_rows[0]["x"], cb_rows[0]["y"]) == (0.5, 0.62)
        last = cb_rows[-1]
        assert last["time"] == 2.0
        assert last["frame_index"] == 1
        end = animation.frames[1][2].movement.points[3]
        assert (last["x"], last["y"]) == end

    def test_fixed_marker_stays_put(self):
        animation = Animation.from_lineup([(Fixed((0.3, 0.4)), "LB", Role.DEFENDING)])
        rows = sample_trajectories(animation, samples_per_step=3)
        assert {(r["x"], r["y"]) for r in rows} == {(0.3, 0.4)}
        assert {r["role"] for r in rows} == {"defending"}

    def test_rejects_zero_samples(self):
        with pytest.raises(ValueError):
            sample_trajectories(default_animation(), samples_per_step=0)

    def test_csv_round_trip(self, tmp_path):
        animation = _edited_animation()
        path = tmp_path / "exports" / "trajectories.csv"
        count = export_trajectories_csv(animation, path, samples_per_step=2)
        with path.open(newline="", encoding="utf-8") as handle:
            rows = list(csv.DictReader(handle))
        assert count == len(rows) == 5 * len(animation.current)
        assert rows[0]["label"] == "LW"
        assert float(rows[-1]["time"]) == pytest.approx(2.0)
        assert rows[-1]["role"] == "ball"
