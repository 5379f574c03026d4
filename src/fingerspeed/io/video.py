from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Protocol, Tuple, Union

import cv2
import numpy as np


logger = logging.getLogger("fingerspeed.io.video")


@dataclass(frozen=True)
class VideoReaderConfig:
    source: Union[int, str]
    resize_enabled: bool = False
    resize_width: int = 1280
    resize_height: int = 720

    @property
    def is_live(self) -> bool:
        return isinstance(self.source, int)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "VideoReaderConfig":
        resize = d.get("resize", {}) or {}
        raw = d.get("source", 0)
        # bare digits select a local camera index
        source: Union[int, str] = int(raw) if str(raw).strip().isdigit() else str(raw)
        return VideoReaderConfig(
            source=source,
            resize_enabled=bool(resize.get("enabled", False)),
            resize_width=int(resize.get("width", 1280)),
            resize_height=int(resize.get("height", 720)),
        )


class VideoReader:
    """Yields ``(frame_index, timestamp_s, frame_bgr)`` with non-decreasing timestamps."""

    def __init__(self, cfg: VideoReaderConfig) -> None:
        self._cfg = cfg
        self._cap = cv2.VideoCapture(cfg.source)
        if not self._cap.isOpened():
            raise RuntimeError(f"Failed to open video source: {cfg.source}")
        try:
            self._cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)
        except cv2.error:
            logger.debug("CAP_PROP_BUFFERSIZE not supported by backend")

        self._t0_wall = time.monotonic()
        self._t_last_s = 0.0
        self._frame_index = 0
        logger.info(
            "Opened video source %s (%dx%d)",
            cfg.source,
            int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )

    def __iter__(self) -> Iterator[Tuple[int, float, np.ndarray]]:
        while True:
            ok, frame = self._cap.read()
            if not ok:
                break
            if self._cfg.resize_enabled:
                frame = cv2.resize(frame, (self._cfg.resize_width, self._cfg.resize_height), interpolation=cv2.INTER_LINEAR)
            t_s = self._timestamp_s()
            fi = self._frame_index
            self._frame_index += 1
            yield fi, t_s, frame

    def _timestamp_s(self) -> float:
        t_s = float(time.monotonic() - self._t0_wall)
        if not self._cfg.is_live:
            pos_msec = self._cap.get(cv2.CAP_PROP_POS_MSEC)
            if pos_msec is not None and pos_msec > 0:
                t_s = float(pos_msec) / 1000.0
        t_s = max(t_s, self._t_last_s)
        self._t_last_s = t_s
        return t_s

    def close(self) -> None:
        self._cap.release()


class FrameSource(Protocol):
    def __iter__(self) -> Iterator[Tuple[int, float, np.ndarray]]:
        ...

    def close(self) -> None:
        ...
