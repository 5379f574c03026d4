from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from fingerspeed.pipeline.session import TrackingSession, TrackingSessionConfig
from fingerspeed.utils.config import load_yaml, resolve_path
from fingerspeed.utils.logging import setup_logging


def main() -> None:
    ap = argparse.ArgumentParser(description="Measure index fingertip speed from a camera or video file")
    ap.add_argument("--config", default="configs/finger_speed.yaml", help="Session YAML")
    ap.add_argument("--source", default=None, help="Camera index or video path (overrides camera.source)")
    ap.add_argument("--model", default=None, help="hand_landmarker.task path (overrides detection.params.model_path)")
    ap.add_argument("--mirror", action=argparse.BooleanOptionalAction, default=None, help="Mirror the preview")
    ap.add_argument("--no-show", action="store_true", help="Run without a preview window")
    ap.add_argument("--log-level", default="INFO")
    ap.add_argument("--log-file", default=None)
    args = ap.parse_args()

    base_dir = os.getcwd()
    setup_logging(level=args.log_level, log_file=args.log_file)

    cfg = load_yaml(resolve_path(args.config, base_dir))
    if args.source is not None:
        cfg.setdefault("camera", {})["source"] = args.source
    if args.model is not None:
        cfg.setdefault("detection", {}).setdefault("params", {})["model_path"] = args.model
    if args.mirror is not None:
        cfg.setdefault("overlay", {})["mirror"] = bool(args.mirror)
    if args.no_show:
        cfg.setdefault("overlay", {})["show"] = False

    session = TrackingSession(TrackingSessionConfig(config=cfg, base_dir=base_dir))
    try:
        session.run()
    except KeyboardInterrupt:
        session.stop()


if __name__ == "__main__":
    main()
