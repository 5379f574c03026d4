from pathlib import Path

import pytest

from fingerspeed.detection.mock import MockDetector, hand_from_config
from fingerspeed.detection.registry import create_detector
from fingerspeed.io.video import VideoReaderConfig
from fingerspeed.kinematics.estimator import KinematicEstimatorConfig
from fingerspeed.output.overlay import OverlayConfig
from fingerspeed.utils.config import load_yaml, resolve_path, section
from fingerspeed.utils.types import HandLandmarks

ROOT = Path(__file__).resolve().parents[1]


def test_load_yaml_requires_mapping(tmp_path: Path) -> None:
    ok = tmp_path / "ok.yaml"
    ok.write_text("kinematics:\n  fps_alpha: 0.5\n", encoding="utf-8")
    assert load_yaml(str(ok)) == {"kinematics": {"fps_alpha": 0.5}}

    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    assert load_yaml(str(empty)) == {}

    bad = tmp_path / "bad.yaml"
    bad.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml(str(bad))


def test_section_and_resolve_path(tmp_path: Path) -> None:
    assert section({"a": None}, "a") == {}
    assert section({}, "a") == {}
    assert section({"a": {"x": 1}}, "a") == {"x": 1}
    with pytest.raises(ValueError):
        section({"a": [1, 2]}, "a")
    assert resolve_path("/abs/file.task") == "/abs/file.task"
    assert resolve_path("m.task", str(tmp_path)) == str((tmp_path / "m.task").resolve())


def test_bundled_config_parses() -> None:
    cfg = load_yaml(str(ROOT / "configs" / "finger_speed.yaml"))
    kin = KinematicEstimatorConfig.from_dict(section(cfg, "kinematics"), section(cfg, "arrows"))
    assert kin.fps_alpha == 0.25
    assert kin.velocity_alpha == 0.30
    assert kin.acceleration_alpha == 0.35
    assert kin.arrows.min_length_px == 6.0
    assert kin.arrows.max_length_px == 160.0
    assert abs(kin.arrows.head_angle_rad - 3.141592653589793 * 0.85) < 1e-12
    cam = VideoReaderConfig.from_dict(section(cfg, "camera"))
    assert cam.source == 0
    assert cam.is_live is True
    overlay = OverlayConfig.from_dict(section(cfg, "overlay"))
    assert overlay.mirror is True


def test_video_source_parsing() -> None:
    assert VideoReaderConfig.from_dict({"source": "1"}).source == 1
    cfg = VideoReaderConfig.from_dict({"source": "clips/hand.mp4", "resize": {"enabled": True, "width": 320}})
    assert cfg.source == "clips/hand.mp4"
    assert cfg.is_live is False
    assert cfg.resize_enabled is True
    assert cfg.resize_width == 320
    assert cfg.resize_height == 720


def test_overlay_config_falls_back_on_bad_colors() -> None:
    cfg = OverlayConfig.from_dict({"velocity_color_bgr": [1, 2, 3], "tip_color_bgr": "green"})
    assert cfg.velocity_color_bgr == (1, 2, 3)
    assert cfg.tip_color_bgr == OverlayConfig().tip_color_bgr


def test_create_detector_backends() -> None:
    det = create_detector("mock", {"script": [None, {"landmarks": [[0.1, 0.2, 0.3]]}]})
    assert isinstance(det, MockDetector)
    assert det.script[0] == HandLandmarks()
    assert det.script[1].landmarks == [(0.1, 0.2, 0.3)]
    with pytest.raises(ValueError):
        create_detector("mock", {"script": "nope"})
    with pytest.raises(ValueError):
        create_detector("mediapipe", {})
    with pytest.raises(ValueError):
        create_detector("openpose", {})


def test_hand_from_config_validates_points() -> None:
    with pytest.raises(ValueError):
        hand_from_config({"landmarks": [[0.1, 0.2]]})
    with pytest.raises(ValueError):
        hand_from_config(42)


def test_mediapipe_backend_requires_existing_model(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        create_detector("mediapipe", {"model_path": "missing.task"}, base_dir=str(tmp_path))
