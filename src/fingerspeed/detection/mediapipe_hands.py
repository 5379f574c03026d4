from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List

import cv2
import numpy as np

from fingerspeed.detection.base import DetectorInput, HandDetector
from fingerspeed.utils.types import HandLandmarks, Vec3


logger = logging.getLogger("fingerspeed.detection.mediapipe")


@dataclass
class MediaPipeHandDetector(HandDetector):
    """MediaPipe Tasks ``HandLandmarker`` in VIDEO running mode, first hand only."""
    model_path: str
    num_hands: int = 1
    min_detection_confidence: float = 0.6
    min_presence_confidence: float = 0.6
    min_tracking_confidence: float = 0.6
    _landmarker: Any = field(default=None, init=False, repr=False)
    _last_ts_ms: int = field(default=-1, init=False, repr=False)

    def __post_init__(self) -> None:
        if not Path(self.model_path).is_file():
            raise FileNotFoundError(f"Hand landmarker model not found: {self.model_path}")

        from mediapipe.tasks import python as mp_python
        from mediapipe.tasks.python import vision as mp_vision

        options = mp_vision.HandLandmarkerOptions(
            base_options=mp_python.BaseOptions(model_asset_path=self.model_path),
            running_mode=mp_vision.RunningMode.VIDEO,
            num_hands=int(self.num_hands),
            min_hand_detection_confidence=float(self.min_detection_confidence),
            min_hand_presence_confidence=float(self.min_presence_confidence),
            min_tracking_confidence=float(self.min_tracking_confidence),
        )
        self._landmarker = mp_vision.HandLandmarker.create_from_options(options)
        logger.info("HandLandmarker ready: model=%s num_hands=%d", self.model_path, self.num_hands)

    def detect(self, inp: DetectorInput) -> HandLandmarks:
        import mediapipe as mp

        rgb = cv2.cvtColor(inp.image_bgr, cv2.COLOR_BGR2RGB)
        if not rgb.flags["C_CONTIGUOUS"]:
            rgb = np.ascontiguousarray(rgb)
        image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        result = self._landmarker.detect_for_video(image, self._next_timestamp_ms(inp.timestamp_s))

        hands = getattr(result, "hand_landmarks", None) or []
        if not hands:
            return HandLandmarks()
        world = getattr(result, "hand_world_landmarks", None) or []
        return HandLandmarks(
            landmarks=_to_xyz(hands[0]),
            world_landmarks=_to_xyz(world[0]) if world else None,
        )

    def close(self) -> None:
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None

    def _next_timestamp_ms(self, t_s: float) -> int:
        # detect_for_video rejects timestamps that do not strictly increase
        ts = int(round(float(t_s) * 1000.0))
        if ts <= self._last_ts_ms:
            ts = self._last_ts_ms + 1
        self._last_ts_ms = ts
        return ts


def _to_xyz(points: Any) -> List[Vec3]:
    return [(float(p.x), float(p.y), float(p.z)) for p in points]
