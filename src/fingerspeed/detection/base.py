from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import numpy as np

from fingerspeed.utils.types import HandLandmarks

INDEX_FINGER_TIP = 8


@dataclass(frozen=True)
class DetectorInput:
    frame_index: int
    timestamp_s: float
    image_bgr: np.ndarray


class HandDetector(Protocol):
    def detect(self, inp: DetectorInput) -> HandLandmarks:
        ...

    def close(self) -> None:
        ...
