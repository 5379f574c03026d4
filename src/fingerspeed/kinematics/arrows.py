from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fingerspeed.utils.types import Arrow, Vec2


@dataclass(frozen=True)
class ArrowConfig:
    window_s: float = 0.08
    min_length_px: float = 6.0
    max_length_px: float = 160.0
    head_length_px: float = 12.0
    head_angle_rad: float = math.pi * 0.85

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "ArrowConfig":
        cfg = ArrowConfig(
            window_s=float(d.get("window_s", 0.08)),
            min_length_px=float(d.get("min_length_px", 6.0)),
            max_length_px=float(d.get("max_length_px", 160.0)),
            head_length_px=float(d.get("head_length_px", 12.0)),
            head_angle_rad=float(d.get("head_angle_rad", math.pi * 0.85)),
        )
        if cfg.window_s <= 0.0:
            raise ValueError("arrows.window_s must be > 0")
        if cfg.max_length_px < cfg.min_length_px:
            raise ValueError("arrows.max_length_px must be >= arrows.min_length_px")
        return cfg


def velocity_displacement(v: Vec2, window_s: float) -> Vec2:
    """Distance covered in ``window_s`` at constant velocity ``v`` (px/s)."""
    return (float(v[0]) * window_s, float(v[1]) * window_s)


def acceleration_displacement(a: Vec2, window_s: float) -> Vec2:
    """Displacement from rest under constant acceleration ``a`` (px/s^2): ``a*T^2/2``."""
    k = 0.5 * window_s * window_s
    return (float(a[0]) * k, float(a[1]) * k)


def clamp_displacement(d: Vec2, min_length: float, max_length: float) -> Optional[Vec2]:
    """Drop displacements shorter than ``min_length``; rescale longer than ``max_length``."""
    dx, dy = float(d[0]), float(d[1])
    length = math.hypot(dx, dy)
    if not math.isfinite(length) or length < min_length:
        return None
    if length > max_length:
        s = max_length / length
        dx *= s
        dy *= s
    return (dx, dy)


def velocity_arrow(v: Vec2, cfg: ArrowConfig) -> Optional[Vec2]:
    return clamp_displacement(velocity_displacement(v, cfg.window_s), cfg.min_length_px, cfg.max_length_px)


def acceleration_arrow(a: Vec2, cfg: ArrowConfig) -> Optional[Vec2]:
    return clamp_displacement(acceleration_displacement(a, cfg.window_s), cfg.min_length_px, cfg.max_length_px)


def arrow_geometry(origin_xy: Vec2, displacement: Vec2, cfg: ArrowConfig) -> Arrow:
    ox, oy = float(origin_xy[0]), float(origin_xy[1])
    tx = ox + float(displacement[0])
    ty = oy + float(displacement[1])
    theta = math.atan2(float(displacement[1]), float(displacement[0]))
    h = float(cfg.head_length_px)
    left = (tx + h * math.cos(theta + cfg.head_angle_rad), ty + h * math.sin(theta + cfg.head_angle_rad))
    right = (tx + h * math.cos(theta - cfg.head_angle_rad), ty + h * math.sin(theta - cfg.head_angle_rad))
    return Arrow(origin_xy=(ox, oy), tip_xy=(tx, ty), head_left_xy=left, head_right_xy=right)
