"""
Demonstration of the data flow: lineup -> edited keyframes -> JSON -> CSV and video.

Builds a two-step move without opening a window:
- The centre back runs a curved path toward the goal area.
- The ball moves toward the pivot in the second step.
- Every other player keeps their starting position.
"""

from __future__ import annotations

from pathlib import Path

from move_editor.animation import default_animation
from move_editor.config import Config
from move_editor.data_structures import Curve
from move_editor.storage import export_trajectories_csv, save_animation
from move_editor.utils.video_io import write_video
from move_editor.visualization import DARK_THEME, render_playback


def main() -> None:
    config = Config(output_dir=Path("outputs/demo"), state_file=Path("outputs/demo/animation.json"))
    config.ensure_output_dirs()

    # 1) Start from the default 6 v 6 lineup and bend the centre back's path.
    animation = default_animation()
    centre_back = animation.current[2]
    centre_back.movement = Curve(((0.50, 0.62), (0.55, 0.58), (0.60, 0.50), (0.62, 0.42)))

    # 2) Second step: the derived curve continues the run; the ball moves to the pivot.
    animation.append_frame()
    ball = animation.current[-1]
    ball.toggle_path_type()
    ball.active = True
    # Curve end starts at (0.60, 0.75); drag it onto the pivot at (0.50, 0.32).
    ball.translate((-0.10, -0.43), 3)
    ball.active = False

    # 3) Persist the move so the editor can pick it up.
    save_animation(animation, config.state_file)

    # 4) Sample trajectories and render the playback.
    rows = export_trajectories_csv(animation, config.exports_dir / "demo_trajectories.csv", samples_per_step=20)
    video_path = config.videos_dir / "demo.mp4"
    canvases = (canvas for _time, canvas in render_playback(animation, config, DARK_THEME))
    frames = write_video(video_path, canvases, config.video_fps, config.canvas_size, config.video_codec)

    print("Steps:", len(animation.frames))
    print("Trajectory rows:", rows)
    print(f"Video frames: {frames} -> {video_path}")


if __name__ == "__main__":
    main()
