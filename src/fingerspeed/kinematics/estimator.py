from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from fingerspeed.kinematics.arrows import ArrowConfig, acceleration_arrow, velocity_arrow
from fingerspeed.kinematics.math import instantaneous_fps, pixel_velocity, positive_dt, speed_3d
from fingerspeed.kinematics.smoothing import EmaSmoother, EmaSmoother2D
from fingerspeed.kinematics.units import norm_to_px_speed
from fingerspeed.utils.config import parse_alpha
from fingerspeed.utils.types import (
    ArrowSet,
    FrameObservation,
    KinematicsOutput,
    Sample,
    SpeedReadout,
    Vec3,
    VelocitySample,
)


logger = logging.getLogger("fingerspeed.kinematics.estimator")

SCREEN_UNITS = {"norm", "px", "both"}


@dataclass(frozen=True)
class KinematicEstimatorConfig:
    screen_speed_enabled: bool = True
    world_speed_enabled: bool = True
    velocity_enabled: bool = True
    acceleration_enabled: bool = True
    screen_units: str = "both"
    fps_alpha: float = 0.25
    velocity_alpha: float = 0.30
    acceleration_alpha: float = 0.35
    arrows: ArrowConfig = field(default_factory=ArrowConfig)

    @property
    def report_norm(self) -> bool:
        return self.screen_speed_enabled and self.screen_units in {"norm", "both"}

    @property
    def report_px(self) -> bool:
        return self.screen_speed_enabled and self.screen_units in {"px", "both"}

    @staticmethod
    def from_dict(d: Dict[str, Any], arrows: Optional[Dict[str, Any]] = None) -> "KinematicEstimatorConfig":
        channels = d.get("channels", {}) or {}
        screen_units = str(d.get("screen_units", "both")).lower()
        if screen_units not in SCREEN_UNITS:
            raise ValueError("kinematics.screen_units must be one of: norm, px, both")
        velocity_enabled = bool(channels.get("velocity", True))
        acceleration_enabled = bool(channels.get("acceleration", True))
        if acceleration_enabled and not velocity_enabled:
            raise ValueError("kinematics.channels.acceleration requires kinematics.channels.velocity")
        return KinematicEstimatorConfig(
            screen_speed_enabled=bool(channels.get("screen_speed", True)),
            world_speed_enabled=bool(channels.get("world_speed", True)),
            velocity_enabled=velocity_enabled,
            acceleration_enabled=acceleration_enabled,
            screen_units=screen_units,
            fps_alpha=parse_alpha(d.get("fps_alpha", 0.25), "kinematics.fps_alpha"),
            velocity_alpha=parse_alpha(d.get("velocity_alpha", 0.30), "kinematics.velocity_alpha"),
            acceleration_alpha=parse_alpha(d.get("acceleration_alpha", 0.35), "kinematics.acceleration_alpha"),
            arrows=ArrowConfig.from_dict(arrows or {}),
        )


@dataclass
class _SpeedChannel:
    """Finite-difference speed against a single anchor sample in one coordinate space."""
    anchor: Optional[Sample] = None
    speed: float = 0.0
    max_speed: float = 0.0

    def observe(self, xyz: Vec3, t_s: float, measure: bool = True) -> Optional[float]:
        prev = self.anchor
        v = None
        if prev is not None and measure:
            v = speed_3d(prev.xyz, prev.timestamp_s, xyz, t_s)
            if v is not None:
                self.speed = v
                self.max_speed = max(self.max_speed, v)
        # advance even on a zero/negative dt so one bad delta does not stall the next
        self.anchor = Sample(timestamp_s=float(t_s), xyz=xyz)
        return v

    def lose(self) -> None:
        self.anchor = None


class KinematicEstimator:
    """
    Per-frame estimator of fps, fingertip speed, 2D velocity and acceleration.

    Each ``update`` is a synchronous state transition and never raises on
    degenerate input: a non-positive dt skips the derived update, a frame
    without the tracked point clears the anchors and leaves every derived value
    at its last reading.

    Not thread-safe. The owner must call ``update``/``reset_maxima`` from one
    thread at a time (normally the frame loop).
    """

    def __init__(self, cfg: Optional[KinematicEstimatorConfig] = None) -> None:
        self._cfg = cfg or KinematicEstimatorConfig()
        self._fps = EmaSmoother(alpha=self._cfg.fps_alpha)
        self._velocity = EmaSmoother2D(alpha=self._cfg.velocity_alpha)
        self._acceleration = EmaSmoother2D(alpha=self._cfg.acceleration_alpha)
        self.reset()

    @property
    def last_sample(self) -> Optional[Sample]:
        return self._screen.anchor

    @property
    def last_world_sample(self) -> Optional[Sample]:
        return self._world.anchor

    @property
    def last_velocity(self) -> Optional[VelocitySample]:
        return self._last_velocity

    def reset(self) -> None:
        """Zero every estimate and clear all anchors (session start)."""
        self._fps.reset()
        self._velocity.reset()
        self._acceleration.reset()
        self._screen = _SpeedChannel()
        self._world = _SpeedChannel()
        self._speed_px = 0.0
        self._max_speed_px = 0.0
        self._last_velocity: Optional[VelocitySample] = None
        self._tip_xyz: Optional[Vec3] = None
        self._t_last_s = 0.0
        self._visible = False

    def reset_maxima(self) -> None:
        self._screen.max_speed = 0.0
        self._world.max_speed = 0.0
        self._max_speed_px = 0.0

    def update(self, obs: FrameObservation) -> KinematicsOutput:
        t = float(obs.timestamp_s)
        self._t_last_s = t
        xyz = obs.screen_xyz
        if not obs.visible or xyz is None:
            self._visible = False
            self._lose_screen()
            self._world.lose()
            return self.snapshot()

        self._visible = True
        self._tip_xyz = xyz
        prev = self._screen.anchor
        dt = positive_dt(prev.timestamp_s, t) if prev is not None else None
        if prev is not None and dt is None and logger.isEnabledFor(logging.DEBUG):
            logger.debug("non-positive dt, skipping update: t_prev=%.6f t=%.6f", prev.timestamp_s, t)

        if prev is not None and dt is not None:
            inst = instantaneous_fps(prev.timestamp_s, t)
            if inst is not None:
                self._fps.update(inst)
            if self._cfg.velocity_enabled:
                self._update_velocity(prev.xyz, xyz, dt, t, obs)

        v_norm = self._screen.observe(xyz, t, measure=self._cfg.screen_speed_enabled)
        if v_norm is not None:
            self._speed_px = norm_to_px_speed(v_norm, obs.canvas)
            self._max_speed_px = max(self._max_speed_px, self._speed_px)

        if self._cfg.world_speed_enabled:
            if obs.world_xyz is None:
                self._world.lose()
            else:
                self._world.observe(obs.world_xyz, t)
        return self.snapshot()

    def snapshot(self) -> KinematicsOutput:
        cfg = self._cfg
        velocity = self._velocity.value
        acceleration = self._acceleration.value
        arrows = ArrowSet(
            velocity=velocity_arrow(velocity, cfg.arrows) if cfg.velocity_enabled else None,
            acceleration=acceleration_arrow(acceleration, cfg.arrows) if cfg.acceleration_enabled else None,
        )
        return KinematicsOutput(
            timestamp_s=self._t_last_s,
            visible=self._visible,
            fps=self._fps.value,
            speed=SpeedReadout(
                norm=self._screen.speed if cfg.report_norm else None,
                px=self._speed_px if cfg.report_px else None,
                mps=self._world.speed if cfg.world_speed_enabled else None,
            ),
            max_speed=SpeedReadout(
                norm=self._screen.max_speed if cfg.report_norm else None,
                px=self._max_speed_px if cfg.report_px else None,
                mps=self._world.max_speed if cfg.world_speed_enabled else None,
            ),
            velocity_2d=velocity,
            acceleration_2d=acceleration,
            arrows=arrows,
            tip_xyz=self._tip_xyz,
        )

    def _update_velocity(self, p0: Vec3, p1: Vec3, dt: float, t: float, obs: FrameObservation) -> None:
        raw_vx, raw_vy = pixel_velocity(p0, p1, dt, obs.canvas.width, obs.canvas.height)
        vx, vy = self._velocity.update(raw_vx, raw_vy)
        if not self._cfg.acceleration_enabled:
            return
        anchor = self._last_velocity
        if anchor is not None:
            dt_v = positive_dt(anchor.timestamp_s, t)
            if dt_v is not None:
                self._acceleration.update((vx - anchor.vx) / dt_v, (vy - anchor.vy) / dt_v)
        self._last_velocity = VelocitySample(timestamp_s=t, vx=vx, vy=vy)

    def _lose_screen(self) -> None:
        self._screen.lose()
        self._last_velocity = None
