from __future__ import annotations

import math
from typing import Optional, Tuple

from fingerspeed.utils.types import Vec3


def positive_dt(t0_s: float, t1_s: float) -> Optional[float]:
    """Return ``t1 - t0`` when it is a usable positive delta, else ``None``."""
    dt = float(t1_s - t0_s)
    if not math.isfinite(dt) or dt <= 0.0:
        return None
    return dt


def distance_3d(p0: Vec3, p1: Vec3) -> float:
    dx = float(p1[0] - p0[0])
    dy = float(p1[1] - p0[1])
    dz = float(p1[2] - p0[2])
    return float(math.sqrt(dx * dx + dy * dy + dz * dz))


def speed_3d(p0: Vec3, t0_s: float, p1: Vec3, t1_s: float) -> Optional[float]:
    dt = positive_dt(t0_s, t1_s)
    if dt is None:
        return None
    return float(distance_3d(p0, p1) / dt)


def instantaneous_fps(t0_s: float, t1_s: float) -> Optional[float]:
    dt = positive_dt(t0_s, t1_s)
    if dt is None:
        return None
    return float(1.0 / dt)


def pixel_velocity(
    p0: Vec3, p1: Vec3, dt_s: float, width: float, height: float
) -> Tuple[float, float]:
    # normalized delta scaled per axis by the canvas dimension
    vx = float(p1[0] - p0[0]) * float(width) / dt_s
    vy = float(p1[1] - p0[1]) * float(height) / dt_s
    return (vx, vy)
