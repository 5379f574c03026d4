from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import cv2
import numpy as np

from fingerspeed.kinematics.arrows import ArrowConfig, arrow_geometry
from fingerspeed.kinematics.units import norm_to_px_point
from fingerspeed.utils.types import Arrow, CanvasSize, HandLandmarks, KinematicsOutput, Vec2

Color = Tuple[int, int, int]

HAND_CONNECTIONS: List[Tuple[int, int]] = [
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (5, 9), (9, 10), (10, 11), (11, 12),
    (9, 13), (13, 14), (14, 15), (15, 16),
    (13, 17), (17, 18), (18, 19), (19, 20),
    (0, 17),
]


def _parse_color(v: Any, default: Color) -> Color:
    if isinstance(v, (list, tuple)) and len(v) == 3:
        try:
            return (int(v[0]), int(v[1]), int(v[2]))
        except (TypeError, ValueError):
            return default
    return default


@dataclass(frozen=True)
class OverlayConfig:
    show: bool = True
    window_name: str = "fingerspeed"
    mirror: bool = True
    show_arrows: bool = True
    show_skeleton: bool = True
    connector_color_bgr: Color = (255, 209, 58)
    landmark_color_bgr: Color = (138, 224, 255)
    tip_color_bgr: Color = (159, 209, 33)
    velocity_color_bgr: Color = (0, 200, 255)
    acceleration_color_bgr: Color = (255, 80, 255)
    hud_text_color_bgr: Color = (255, 236, 230)
    arrow_thickness: int = 3

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "OverlayConfig":
        base = OverlayConfig()
        return OverlayConfig(
            show=bool(d.get("show", base.show)),
            window_name=str(d.get("window_name", base.window_name)),
            mirror=bool(d.get("mirror", base.mirror)),
            show_arrows=bool(d.get("show_arrows", base.show_arrows)),
            show_skeleton=bool(d.get("show_skeleton", base.show_skeleton)),
            connector_color_bgr=_parse_color(d.get("connector_color_bgr"), base.connector_color_bgr),
            landmark_color_bgr=_parse_color(d.get("landmark_color_bgr"), base.landmark_color_bgr),
            tip_color_bgr=_parse_color(d.get("tip_color_bgr"), base.tip_color_bgr),
            velocity_color_bgr=_parse_color(d.get("velocity_color_bgr"), base.velocity_color_bgr),
            acceleration_color_bgr=_parse_color(d.get("acceleration_color_bgr"), base.acceleration_color_bgr),
            hud_text_color_bgr=_parse_color(d.get("hud_text_color_bgr"), base.hud_text_color_bgr),
            arrow_thickness=int(d.get("arrow_thickness", base.arrow_thickness)),
        )


def hud_lines(out: KinematicsOutput) -> List[str]:
    lines = [f"FPS: {out.fps:.1f}"]
    if out.speed.mps is not None:
        lines.append(f"Speed (m/s): {out.speed.mps:.3f}")
        lines.append(f"Max (m/s): {(out.max_speed.mps or 0.0):.3f}")
    if out.speed.px is not None:
        lines.append(f"Speed (px/s): {out.speed.px:.0f}")
        lines.append(f"Max (px/s): {(out.max_speed.px or 0.0):.0f}")
    elif out.speed.norm is not None:
        lines.append(f"Speed (u/s): {out.speed.norm:.3f}")
        lines.append(f"Max (u/s): {(out.max_speed.norm or 0.0):.3f}")
    if out.tip_xyz is not None:
        x, y, z = out.tip_xyz
        lines.append(f"Index (x,y,z): {x:.3f}, {y:.3f}, {z:.3f}")
    return lines


@dataclass
class OverlayRenderer:
    cfg: OverlayConfig = field(default_factory=OverlayConfig)
    arrows: ArrowConfig = field(default_factory=ArrowConfig)
    landmark_index: int = 8

    def draw(
        self,
        frame_bgr: np.ndarray,
        hand: HandLandmarks,
        out: KinematicsOutput,
        mirror: Optional[bool] = None,
        show_arrows: Optional[bool] = None,
    ) -> np.ndarray:
        img = frame_bgr
        canvas = CanvasSize.of(img)
        mirror = self.cfg.mirror if mirror is None else bool(mirror)
        show_arrows = self.cfg.show_arrows if show_arrows is None else bool(show_arrows)

        tip = hand.point(self.landmark_index)
        if hand.landmarks and self.cfg.show_skeleton:
            self._draw_skeleton(img, hand.landmarks, canvas)
        if tip is not None:
            tip_px = norm_to_px_point(tip, canvas)
            cv2.circle(img, (int(tip_px[0]), int(tip_px[1])), 10, self.cfg.tip_color_bgr, 3)
            if show_arrows:
                self._draw_displacement(img, tip_px, out.arrows.velocity, self.cfg.velocity_color_bgr)
                self._draw_displacement(img, tip_px, out.arrows.acceleration, self.cfg.acceleration_color_bgr)

        if mirror:
            img = cv2.flip(img, 1)
        self._draw_hud(img, hud_lines(out))
        return img

    def _draw_skeleton(self, img: np.ndarray, landmarks: List[Tuple[float, float, float]], canvas: CanvasSize) -> None:
        pts = [norm_to_px_point(p, canvas) for p in landmarks]
        for a, b in HAND_CONNECTIONS:
            if a < len(pts) and b < len(pts):
                pa = (int(pts[a][0]), int(pts[a][1]))
                pb = (int(pts[b][0]), int(pts[b][1]))
                cv2.line(img, pa, pb, self.cfg.connector_color_bgr, 3)
        for x, y in pts:
            cv2.circle(img, (int(x), int(y)), 3, self.cfg.landmark_color_bgr, -1)

    def _draw_displacement(self, img: np.ndarray, origin: Vec2, displacement: Optional[Vec2], color: Color) -> None:
        if displacement is None:
            return
        self._draw_arrow(img, arrow_geometry(origin, displacement, self.arrows), color)

    def _draw_arrow(self, img: np.ndarray, arrow: Arrow, color: Color) -> None:
        t = int(self.cfg.arrow_thickness)
        o = (int(round(arrow.origin_xy[0])), int(round(arrow.origin_xy[1])))
        tip = (int(round(arrow.tip_xy[0])), int(round(arrow.tip_xy[1])))
        cv2.line(img, o, tip, color, t, cv2.LINE_AA)
        for head in (arrow.head_left_xy, arrow.head_right_xy):
            cv2.line(img, tip, (int(round(head[0])), int(round(head[1]))), color, t, cv2.LINE_AA)

    def _draw_hud(self, img: np.ndarray, lines: List[str]) -> None:
        h, w = img.shape[:2]
        x0, y0 = 10, 10
        x1 = min(w, x0 + 360)
        y1 = min(h, y0 + 16 + 24 * len(lines))
        if x1 > x0 and y1 > y0:
            roi = img[y0:y1, x0:x1]
            img[y0:y1, x0:x1] = cv2.addWeighted(roi, 0.6, np.zeros_like(roi), 0.4, 0.0)
        for i, line in enumerate(lines):
            cv2.putText(
                img,
                line,
                (x0 + 10, y0 + 26 + 24 * i),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.55,
                self.cfg.hud_text_color_bgr,
                1,
                cv2.LINE_AA,
            )
