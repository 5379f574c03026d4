from __future__ import annotations

from fingerspeed.utils.types import CanvasSize, Vec2, Vec3


def norm_to_px_speed(v_norm: float, canvas: CanvasSize) -> float:
    return float(v_norm) * canvas.diagonal_px


def norm_to_px_point(xyz: Vec3, canvas: CanvasSize) -> Vec2:
    return (float(xyz[0]) * canvas.width, float(xyz[1]) * canvas.height)

