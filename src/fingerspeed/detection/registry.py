from __future__ import annotations

from typing import Any, Dict, Optional

from fingerspeed.detection.base import HandDetector
from fingerspeed.detection.mock import MockDetector, hand_from_config
from fingerspeed.utils.config import resolve_path


def create_detector(backend: str, params: Dict[str, Any], base_dir: Optional[str] = None) -> HandDetector:
    if backend == "mock":
        script = params.get("script", [])
        if not isinstance(script, list):
            raise ValueError("script must be a list")
        return MockDetector(script=[hand_from_config(x) for x in script])

    if backend == "mediapipe":
        if not params.get("model_path"):
            raise ValueError("detection.params.model_path is required for the mediapipe backend")
        from fingerspeed.detection.mediapipe_hands import MediaPipeHandDetector

        return MediaPipeHandDetector(
            model_path=resolve_path(str(params["model_path"]), base_dir),
            num_hands=int(params.get("num_hands", 1)),
            min_detection_confidence=float(params.get("min_detection_confidence", 0.6)),
            min_presence_confidence=float(params.get("min_presence_confidence", 0.6)),
            min_tracking_confidence=float(params.get("min_tracking_confidence", 0.6)),
        )

    raise ValueError(f"Unknown detector backend: {backend}")
