from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from fingerspeed.detection.base import DetectorInput, HandDetector
from fingerspeed.utils.types import HandLandmarks, Vec3


@dataclass
class MockDetector(HandDetector):
    """Replays ``script[frame_index]``; frames past the end have no hand."""
    script: List[HandLandmarks] = field(default_factory=list)
    closed: bool = False

    def detect(self, inp: DetectorInput) -> HandLandmarks:
        if 0 <= inp.frame_index < len(self.script):
            return self.script[inp.frame_index]
        return HandLandmarks()

    def close(self) -> None:
        self.closed = True


def hand_from_config(item: Any) -> HandLandmarks:
    """Build a scripted frame from ``None`` or ``{landmarks: [[x, y, z], ...], world_landmarks: ...}``."""
    if item is None:
        return HandLandmarks()
    if isinstance(item, HandLandmarks):
        return item
    if not isinstance(item, dict):
        raise ValueError(f"mock script entries must be mappings or null, got {type(item).__name__}")
    return HandLandmarks(
        landmarks=_points(item.get("landmarks")),
        world_landmarks=_points(item.get("world_landmarks")),
    )


def _points(raw: Any) -> Optional[List[Vec3]]:
    if raw is None:
        return None
    out: List[Vec3] = []
    for p in raw:
        if len(p) != 3:
            raise ValueError(f"landmark must have 3 components, got {p!r}")
        out.append((float(p[0]), float(p[1]), float(p[2])))
    return out
