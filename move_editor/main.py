"""
Entry point for the handball move editor.

Three commands share one configuration:

- ``edit`` (default): open the interactive editor, restoring the saved state
  and saving it again on quit.
- ``render``: play the saved move offline into an mp4 video.
- ``export``: sample every marker's trajectory into a CSV file.

It can be run from the command line, for example:

    python -m move_editor.main edit --state_file outputs/animation.json
    python -m move_editor.main render --fps 30 --seconds_per_step 1.5
    python -m move_editor.main export --samples_per_step 20

Defaults can also be configured via ``config.yaml`` in the project root.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict, Optional, cast

try:
    import yaml  # type: ignore[import-not-found]
except ImportError:  # pragma: no cover - optional dependency
    yaml = None  # type: ignore[assignment]

from .animation import Animation, default_animation
from .app import run_app
from .config import Config
from .storage import export_trajectories_csv, load_animation, save_animation
from .utils.video_io import write_video
from .visualization import DARK_THEME, LIGHT_THEME, render_playback


def _load_yaml_config(config_path: Path) -> Dict[str, Any]:
    """
    Load a YAML configuration file if it exists.

    The file is optional; when missing, an empty dict is returned.
    """
    if not config_path.exists():
        return {}
    if yaml is None:
        raise ImportError(
            "pyyaml is required to load config.yaml. "
            "Install it with `pip install pyyaml`."
        )
    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}  # type: ignore[no-untyped-call]
    if not isinstance(data, dict):
        raise ValueError("config.yaml must contain a top-level mapping.")
    return cast(Dict[str, Any], data)


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = cfg.get(name, {}) or {}
    if not isinstance(section, dict):
        raise ValueError(f"config.yaml section '{name}' must be a mapping.")
    return cast(Dict[str, Any], section)


def apply_yaml_config(config: Config, cfg: Dict[str, Any]) -> Config:
    """
    Apply the ``editor``, ``playback``, and ``export`` sections of a YAML mapping.
    """
    editor = _section(cfg, "editor")
    if "state_file" in editor:
        config.state_file = Path(editor["state_file"])
    if "canvas_size" in editor:
        width, height = editor["canvas_size"]
        config.canvas_size = (int(width), int(height))
    if "primary_radii" in editor:
        config.primary_radii = cast(Any, tuple(float(r) for r in editor["primary_radii"]))
    if "secondary_radii" in editor:
        config.secondary_radii = cast(Any, tuple(float(r) for r in editor["secondary_radii"]))
    if "hit_region_scale" in editor:
        config.hit_region_scale = float(editor["hit_region_scale"])
    if "drag_threshold_px" in editor:
        config.drag_threshold_px = float(editor["drag_threshold_px"])
    if "double_click_s" in editor:
        config.double_click_s = float(editor["double_click_s"])
    if "dark_mode" in editor:
        config.dark_mode = bool(editor["dark_mode"])
    if "show_free_throw_line" in editor:
        config.show_free_throw_line = bool(editor["show_free_throw_line"])

    playback = _section(cfg, "playback")
    if "seconds_per_step" in playback:
        config.seconds_per_step = float(playback["seconds_per_step"])

    export = _section(cfg, "export")
    if "output_dir" in export:
        config.output_dir = Path(export["output_dir"])
    if "video_fps" in export:
        config.video_fps = float(export["video_fps"])
    if "video_codec" in export:
        config.video_codec = str(export["video_codec"])
    if "csv_samples_per_step" in export:
        config.csv_samples_per_step = int(export["csv_samples_per_step"])
    return config


def build_config_from_args(args: argparse.Namespace) -> Config:
    """
    Construct a :class:`Config` instance from CLI arguments and optional YAML.
    """
    # Start from code defaults.
    config = Config()

    # Load optional YAML config near the project root.
    default_config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(args.config) if args.config is not None else default_config_path
    apply_yaml_config(config, _load_yaml_config(config_path))

    # CLI > YAML > default.
    if args.state_file is not None:
        config.state_file = Path(args.state_file)
    if args.output_dir is not None:
        config.output_dir = Path(args.output_dir)
    if args.fps is not None:
        config.video_fps = float(args.fps)
    if args.seconds_per_step is not None:
        config.seconds_per_step = max(1e-3, float(args.seconds_per_step))
    if args.samples_per_step is not None:
        config.csv_samples_per_step = max(1, int(args.samples_per_step))
    if getattr(args, "light", False):
        config.dark_mode = False
    if getattr(args, "show_nine_m", False):
        config.show_free_throw_line = True
    return config


def load_or_default(config: Config, reset: bool = False) -> Animation:
    """
    Load the saved animation, falling back to the default lineup.
    """
    if reset:
        return default_animation()
    try:
        animation = load_animation(config.state_file)
    except FileNotFoundError:
        return default_animation()
    except ValueError as exc:
        print(f"Could not read {config.state_file} ({exc}); starting from the default lineup.")
        return default_animation()
    print(f"Loaded {len(animation.frames)} steps from {config.state_file}")
    return animation


def run_editor(config: Config, reset: bool = False) -> None:
    """
    Open the editor window and persist the result on quit.
    """
    config.ensure_output_dirs()
    animation = run_app(load_or_default(config, reset), config)
    save_animation(animation, config.state_file)
    print(f"Saved {len(animation.frames)} steps to {config.state_file}")


def run_render(config: Config, output_path: Optional[Path] = None) -> Path:
    """
    Render the saved move to an mp4 video. Returns the video path.
    """
    config.ensure_output_dirs()
    animation = load_or_default(config)
    path = output_path or config.videos_dir / "move.mp4"
    theme = DARK_THEME if config.dark_mode else LIGHT_THEME
    frames = (canvas for _time, canvas in render_playback(animation, config, theme))
    count = write_video(path, frames, config.video_fps, config.canvas_size, config.video_codec)
    print(f"Rendered {count} frames ({len(animation.frames)} steps) to {path}")
    return path


def run_export(config: Config, output_path: Optional[Path] = None) -> Path:
    """
    Export sampled trajectories of the saved move to CSV. Returns the CSV path.
    """
    config.ensure_output_dirs()
    animation = load_or_default(config)
    path = output_path or config.exports_dir / "trajectories.csv"
    rows = export_trajectories_csv(animation, path, config.csv_samples_per_step)
    print(f"Exported {rows} rows to {path}")
    return path


def main() -> None:
    """
    CLI entrypoint.

    Use ``python -m move_editor.main --help`` for available options.
    """
    parser = argparse.ArgumentParser(
        description="Handball move editor: keyframe player movements and play them back.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="edit",
        choices=["edit", "render", "export"],
        help="What to do (default: edit).",
    )
    parser.add_argument(
        "--state_file",
        type=str,
        help="JSON file holding the animation (loaded on start, saved on quit).",
    )
    parser.add_argument(
        "--output_dir",
        type=str,
        help="Directory for rendered videos and CSV exports.",
    )
    parser.add_argument(
        "--output",
        type=str,
        help="Explicit output path for render/export.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help=(
            "Optional path to YAML config file "
            "(defaults to config.yaml in the project root)."
        ),
    )
    parser.add_argument(
        "--fps",
        type=float,
        help="Frame rate of rendered videos.",
    )
    parser.add_argument(
        "--seconds_per_step",
        type=float,
        help="Playback duration of one step in seconds.",
    )
    parser.add_argument(
        "--samples_per_step",
        type=int,
        help="Trajectory samples per step for CSV export.",
    )
    parser.add_argument(
        "--light",
        action="store_true",
        help="Use the light theme.",
    )
    parser.add_argument(
        "--show_nine_m",
        action="store_true",
        help="Also draw the nine-metre free-throw line.",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Ignore the saved state and start from the default lineup.",
    )

    args = parser.parse_args()
    config = build_config_from_args(args)
    output = Path(args.output) if args.output is not None else None
    if args.command == "render":
        run_render(config, output)
    elif args.command == "export":
        run_export(config, output)
    else:
        run_editor(config, reset=args.reset)


if __name__ == "__main__":
    main()
