from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class CanvasSize:
    width: int
    height: int

    @property
    def diagonal_px(self) -> float:
        return float(math.hypot(self.width, self.height))

    @staticmethod
    def of(image: np.ndarray) -> "CanvasSize":
        h, w = image.shape[:2]
        return CanvasSize(width=int(w), height=int(h))


@dataclass(frozen=True)
class Sample:
    timestamp_s: float
    xyz: Vec3


@dataclass(frozen=True)
class VelocitySample:
    timestamp_s: float
    vx: float
    vy: float


@dataclass(frozen=True)
class FrameObservation:
    """What the estimator sees of one frame.

    ``screen_xyz`` is in normalized image coordinates (x/y in [0, 1], origin
    top-left, z relative depth); ``world_xyz`` is in meters.
    """

    timestamp_s: float
    canvas: CanvasSize
    visible: bool
    screen_xyz: Optional[Vec3] = None
    world_xyz: Optional[Vec3] = None


@dataclass(frozen=True)
class HandLandmarks:
    landmarks: Optional[List[Vec3]] = None
    world_landmarks: Optional[List[Vec3]] = None

    @property
    def has_hand(self) -> bool:
        return bool(self.landmarks)

    def point(self, index: int) -> Optional[Vec3]:
        if not self.landmarks or index >= len(self.landmarks):
            return None
        return self.landmarks[index]

    def world_point(self, index: int) -> Optional[Vec3]:
        if not self.world_landmarks or index >= len(self.world_landmarks):
            return None
        return self.world_landmarks[index]


@dataclass(frozen=True)
class SpeedReadout:
    norm: Optional[float] = None
    px: Optional[float] = None
    mps: Optional[float] = None


@dataclass(frozen=True)
class Arrow:
    origin_xy: Vec2
    tip_xy: Vec2
    head_left_xy: Vec2
    head_right_xy: Vec2

    @property
    def displacement(self) -> Vec2:
        return (self.tip_xy[0] - self.origin_xy[0], self.tip_xy[1] - self.origin_xy[1])


@dataclass(frozen=True)
class ArrowSet:
    velocity: Optional[Vec2] = None
    acceleration: Optional[Vec2] = None


@dataclass(frozen=True)
class KinematicsOutput:
    timestamp_s: float
    visible: bool
    fps: float
    speed: SpeedReadout
    max_speed: SpeedReadout
    velocity_2d: Vec2
    acceleration_2d: Vec2
    arrows: ArrowSet = field(default_factory=ArrowSet)
    tip_xyz: Optional[Vec3] = None
