import math
from typing import Optional

import pytest

from fingerspeed.kinematics.estimator import KinematicEstimator, KinematicEstimatorConfig
from fingerspeed.utils.types import CanvasSize, FrameObservation, Vec3


def _obs(t: float, xyz: Optional[Vec3] = None, world: Optional[Vec3] = None, w: int = 640, h: int = 480) -> FrameObservation:
    return FrameObservation(
        timestamp_s=t,
        canvas=CanvasSize(width=w, height=h),
        visible=xyz is not None,
        screen_xyz=xyz,
        world_xyz=world,
    )


def test_first_sample_only_anchors() -> None:
    est = KinematicEstimator()
    out = est.update(_obs(0.0, (0.5, 0.5, 0.0), (0.0, 0.0, 0.0)))
    assert out.visible is True
    assert out.fps == 0.0
    assert out.speed.norm == 0.0
    assert out.speed.px == 0.0
    assert out.speed.mps == 0.0
    assert out.velocity_2d == (0.0, 0.0)
    assert est.last_sample is not None
    assert est.last_world_sample is not None
    assert est.last_velocity is None


def test_normalized_and_pixel_speed_example() -> None:
    est = KinematicEstimator()
    est.update(_obs(0.000, (0.50, 0.50, 0.0)))
    out = est.update(_obs(0.033, (0.54, 0.50, 0.0)))
    assert out.speed.norm is not None and out.speed.px is not None
    assert abs(out.speed.norm - 0.04 / 0.033) < 1e-6
    assert abs(out.speed.norm - 1.212) < 1e-3
    assert abs(out.speed.px - 969.7) < 0.1
    assert out.max_speed.norm == out.speed.norm
    assert out.max_speed.px == out.speed.px
    assert abs(out.fps - 0.25 / 0.033) < 1e-6


def test_velocity_is_smoothed_pixel_velocity() -> None:
    est = KinematicEstimator()
    est.update(_obs(0.0, (0.50, 0.50, 0.0)))
    out = est.update(_obs(0.1, (0.60, 0.45, 0.0)))
    raw_vx = (0.60 - 0.50) * 640 / 0.1
    raw_vy = (0.45 - 0.50) * 480 / 0.1
    assert abs(out.velocity_2d[0] - 0.30 * raw_vx) < 1e-6
    assert abs(out.velocity_2d[1] - 0.30 * raw_vy) < 1e-6
    # no previous velocity yet, so only the anchor is set
    assert out.acceleration_2d == (0.0, 0.0)
    assert est.last_velocity is not None
    assert est.last_velocity.timestamp_s == 0.1


def test_acceleration_example() -> None:
    est = KinematicEstimator()
    est.update(_obs(0.000, (0.5, 0.5, 0.0)))
    out = est.update(_obs(0.033, (0.5, 0.5, 0.0)))
    assert out.velocity_2d == (0.0, 0.0)

    dt = 0.066 - 0.033
    x2 = 0.5 + (100.0 / 0.30) * dt / 640.0
    out = est.update(_obs(0.066, (x2, 0.5, 0.0)))
    assert abs(out.velocity_2d[0] - 100.0) < 1e-6
    assert abs(out.acceleration_2d[0] - 1060.6) < 0.1
    assert out.acceleration_2d[1] == 0.0


def test_world_speed_in_meters_per_second() -> None:
    est = KinematicEstimator()
    est.update(_obs(0.0, (0.5, 0.5, 0.0), (0.00, 0.00, 0.00)))
    out = est.update(_obs(0.5, (0.5, 0.5, 0.0), (0.03, 0.04, 0.12)))
    assert out.speed.mps is not None
    assert abs(out.speed.mps - 0.13 / 0.5) < 1e-9
    assert out.speed.norm == 0.0


def test_freeze_on_loss_and_reanchor() -> None:
    est = KinematicEstimator()
    est.update(_obs(0.0, (0.5, 0.5, 0.0), (0.0, 0.0, 0.0)))
    out1 = est.update(_obs(1.0, (0.6, 0.5, 0.0), (0.1, 0.0, 0.0)))
    s_norm = out1.speed.norm
    s_mps = out1.speed.mps
    v = out1.velocity_2d
    fps = out1.fps

    lost = est.update(_obs(2.0))
    assert lost.visible is False
    assert lost.speed.norm == s_norm
    assert lost.speed.mps == s_mps
    assert lost.velocity_2d == v
    assert lost.fps == fps
    assert est.last_sample is None
    assert est.last_world_sample is None
    assert est.last_velocity is None

    back = est.update(_obs(3.0, (0.9, 0.9, 0.0), (0.5, 0.5, 0.0)))
    assert back.speed.norm == s_norm
    assert back.speed.mps == s_mps
    assert back.max_speed.norm == s_norm
    assert back.velocity_2d == v
    assert back.fps == fps
    assert est.last_sample is not None
    assert est.last_sample.timestamp_s == 3.0


def test_acceleration_frozen_for_two_frames_after_reacquire() -> None:
    est = KinematicEstimator()
    est.update(_obs(0.0, (0.1, 0.5, 0.0)))
    est.update(_obs(0.1, (0.2, 0.5, 0.0)))
    out = est.update(_obs(0.2, (0.4, 0.5, 0.0)))
    acc = out.acceleration_2d
    assert acc[0] > 0.0

    lost = est.update(_obs(0.3))
    assert lost.acceleration_2d == acc

    first = est.update(_obs(0.4, (0.5, 0.5, 0.0)))
    assert first.acceleration_2d == acc
    assert est.last_velocity is None

    second = est.update(_obs(0.5, (0.9, 0.5, 0.0)))
    assert second.velocity_2d != out.velocity_2d
    assert second.acceleration_2d == acc
    assert est.last_velocity is not None
    assert est.last_velocity.timestamp_s == 0.5

    third = est.update(_obs(0.6, (1.0, 0.5, 0.0)))
    assert third.acceleration_2d != acc



def test_zero_dt_skips_update_but_advances_anchor() -> None:
    est = KinematicEstimator()
    est.update(_obs(0.0, (0.1, 0.1, 0.0)))
    out = est.update(_obs(0.0, (0.2, 0.1, 0.0)))
    assert out.speed.norm == 0.0
    assert out.fps == 0.0
    assert est.last_sample is not None
    assert est.last_sample.xyz == (0.2, 0.1, 0.0)

    out = est.update(_obs(0.1, (0.3, 0.1, 0.0)))
    assert out.speed.norm is not None
    assert abs(out.speed.norm - 1.0) < 1e-9


def test_negative_dt_freezes_values() -> None:
    est = KinematicEstimator()
    est.update(_obs(1.0, (0.1, 0.1, 0.0)))
    first = est.update(_obs(1.1, (0.2, 0.1, 0.0)))
    out = est.update(_obs(1.05, (0.9, 0.9, 0.0)))
    assert out.speed == first.speed
    assert out.velocity_2d == first.velocity_2d
    assert out.fps == first.fps


def test_world_anchor_clears_independently() -> None:
    est = KinematicEstimator()
    est.update(_obs(0.0, (0.5, 0.5, 0.0), (0.0, 0.0, 0.0)))
    est.update(_obs(0.1, (0.5, 0.5, 0.0), (0.1, 0.0, 0.0)))
    out = est.update(_obs(0.2, (0.6, 0.5, 0.0), None))
    assert est.last_world_sample is None
    assert est.last_sample is not None
    assert out.speed.mps is not None
    assert abs(out.speed.mps - 1.0) < 1e-9
    assert out.speed.norm is not None
    assert abs(out.speed.norm - 1.0) < 1e-9

    # world returns: first frame only re-anchors
    out = est.update(_obs(0.3, (0.6, 0.5, 0.0), (5.0, 5.0, 5.0)))
    assert abs(out.speed.mps - 1.0) < 1e-9
    assert est.last_world_sample is not None


def test_reset_maxima_only_touches_maxima() -> None:
    est = KinematicEstimator()
    est.update(_obs(0.0, (0.1, 0.1, 0.0), (0.0, 0.0, 0.0)))
    out = est.update(_obs(0.1, (0.3, 0.1, 0.0), (0.2, 0.0, 0.0)))
    assert out.max_speed.norm is not None and out.max_speed.norm > 0.0

    est.reset_maxima()
    snap = est.snapshot()
    assert snap.max_speed.norm == 0.0
    assert snap.max_speed.px == 0.0
    assert snap.max_speed.mps == 0.0
    assert snap.speed == out.speed
    assert snap.velocity_2d == out.velocity_2d
    assert est.last_sample is not None
    assert est.last_world_sample is not None

    out = est.update(_obs(0.2, (0.31, 0.1, 0.0), (0.21, 0.0, 0.0)))
    assert out.max_speed.norm == out.speed.norm
    assert out.max_speed.mps == out.speed.mps


def test_speed_non_negative_and_max_non_decreasing() -> None:
    est = KinematicEstimator()
    prev_max = 0.0
    prev_max_mps = 0.0
    for i in range(200):
        t = i * 0.033 + 0.002 * math.sin(i)
        xyz = (0.5 + 0.3 * math.sin(i * 0.3), 0.5 + 0.2 * math.cos(i * 0.17), 0.05 * math.sin(i))
        world = (0.1 * math.sin(i * 0.3), 0.1 * math.cos(i * 0.2), 0.0)
        visible = i % 17 != 0
        out = est.update(_obs(t, xyz if visible else None, world if visible else None))
        assert out.speed.norm is not None and out.speed.norm >= 0.0
        assert out.speed.mps is not None and out.speed.mps >= 0.0
        assert out.max_speed.norm >= prev_max
        assert out.max_speed.mps >= prev_max_mps
        assert out.max_speed.norm >= out.speed.norm
        prev_max = out.max_speed.norm
        prev_max_mps = out.max_speed.mps


def test_arrows_follow_smoothed_vectors() -> None:
    est = KinematicEstimator()
    out = est.update(_obs(0.0, (0.5, 0.5, 0.0)))
    assert out.arrows.velocity is None
    assert out.arrows.acceleration is None
    out = est.update(_obs(0.01, (0.7, 0.5, 0.0)))
    assert out.arrows.velocity is not None
    assert abs(math.hypot(*out.arrows.velocity) - 160.0) < 1e-9
    assert out.tip_xyz == (0.7, 0.5, 0.0)


def test_reset_zeroes_everything() -> None:
    est = KinematicEstimator()
    est.update(_obs(0.0, (0.1, 0.1, 0.0), (0.0, 0.0, 0.0)))
    est.update(_obs(0.1, (0.3, 0.1, 0.0), (0.2, 0.0, 0.0)))
    est.update(_obs(0.2, (0.6, 0.1, 0.0), (0.5, 0.0, 0.0)))
    est.reset()
    snap = est.snapshot()
    assert snap.fps == 0.0
    assert snap.speed.norm == 0.0
    assert snap.max_speed.mps == 0.0
    assert snap.velocity_2d == (0.0, 0.0)
    assert snap.acceleration_2d == (0.0, 0.0)
    assert snap.tip_xyz is None
    assert est.last_sample is None
    assert est.last_velocity is None


def test_config_channels_and_units() -> None:
    cfg = KinematicEstimatorConfig.from_dict({"channels": {"world_speed": False}, "screen_units": "px"})
    est = KinematicEstimator(cfg)
    est.update(_obs(0.0, (0.5, 0.5, 0.0), (0.0, 0.0, 0.0)))
    out = est.update(_obs(0.1, (0.6, 0.5, 0.0), (1.0, 0.0, 0.0)))
    assert out.speed.norm is None
    assert out.speed.mps is None
    assert out.speed.px is not None
    assert abs(out.speed.px - 800.0) < 1e-6
    assert est.last_world_sample is None


def test_config_velocity_disabled() -> None:
    cfg = KinematicEstimatorConfig.from_dict({"channels": {"velocity": False, "acceleration": False}})
    est = KinematicEstimator(cfg)
    est.update(_obs(0.0, (0.5, 0.5, 0.0)))
    out = est.update(_obs(0.1, (0.6, 0.5, 0.0)))
    assert out.velocity_2d == (0.0, 0.0)
    assert out.arrows.velocity is None
    assert out.arrows.acceleration is None
    assert out.speed.norm is not None and out.speed.norm > 0.0


def test_config_rejects_invalid_values() -> None:
    with pytest.raises(ValueError):
        KinematicEstimatorConfig.from_dict({"channels": {"velocity": False, "acceleration": True}})
    with pytest.raises(ValueError):
        KinematicEstimatorConfig.from_dict({"screen_units": "furlongs"})
    with pytest.raises(ValueError):
        KinematicEstimatorConfig.from_dict({"fps_alpha": 0.0})
    with pytest.raises(ValueError):
        KinematicEstimatorConfig.from_dict({"velocity_alpha": 1.5})


def test_config_defaults() -> None:
    cfg = KinematicEstimatorConfig.from_dict({})
    assert cfg.fps_alpha == 0.25
    assert cfg.velocity_alpha == 0.30
    assert cfg.acceleration_alpha == 0.35
    assert cfg.report_norm and cfg.report_px
    assert cfg.arrows.window_s == 0.08
