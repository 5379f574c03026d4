from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import cv2
import numpy as np

from fingerspeed.detection.base import INDEX_FINGER_TIP, DetectorInput, HandDetector
from fingerspeed.detection.registry import create_detector
from fingerspeed.io.video import FrameSource, VideoReader, VideoReaderConfig
from fingerspeed.kinematics.estimator import KinematicEstimator, KinematicEstimatorConfig
from fingerspeed.output.overlay import OverlayConfig, OverlayRenderer
from fingerspeed.utils.config import resolve_path, section
from fingerspeed.utils.types import CanvasSize, FrameObservation, HandLandmarks, KinematicsOutput


logger = logging.getLogger("fingerspeed.pipeline.session")

FrameSourceFactory = Callable[[VideoReaderConfig], FrameSource]

KEY_ESC = 27


@dataclass(frozen=True)
class TrackingSessionConfig:
    config: Dict[str, Any]
    base_dir: str
    detector: Optional[HandDetector] = None
    source_factory: Optional[FrameSourceFactory] = None


class TrackingSession:
    """
    Owns one tracking session: detector, frame source and estimator.

    ``start`` opens the detector and the frame source first and only then
    creates a zeroed estimator, so a failed start leaves nothing half
    initialised. ``stop`` drops the estimator and releases both, closing an owned
    detector even when closing the source raises.
    """

    def __init__(self, cfg: TrackingSessionConfig) -> None:
        self._cfg = cfg
        root = cfg.config

        self._camera_cfg = VideoReaderConfig.from_dict(section(root, "camera"))
        if isinstance(self._camera_cfg.source, str):
            self._camera_cfg = VideoReaderConfig(
                source=resolve_path(self._camera_cfg.source, cfg.base_dir),
                resize_enabled=self._camera_cfg.resize_enabled,
                resize_width=self._camera_cfg.resize_width,
                resize_height=self._camera_cfg.resize_height,
            )

        det_cfg = section(root, "detection")
        self._detector_backend = str(det_cfg.get("backend", "mediapipe"))
        self._detector_params = dict(det_cfg.get("params", {}) or {})
        self._landmark_index = int(det_cfg.get("landmark_index", INDEX_FINGER_TIP))

        self._estimator_cfg = KinematicEstimatorConfig.from_dict(section(root, "kinematics"), section(root, "arrows"))
        self._overlay_cfg = OverlayConfig.from_dict(section(root, "overlay"))
        self._renderer = OverlayRenderer(
            cfg=self._overlay_cfg,
            arrows=self._estimator_cfg.arrows,
            landmark_index=self._landmark_index,
        )
        self._raw_log_interval_s = float(section(root, "logging").get("raw_log_interval_s", 1.0))

        self._mirror = self._overlay_cfg.mirror
        self._show_arrows = self._overlay_cfg.show_arrows

        self._detector: Optional[HandDetector] = None
        self._owns_detector = False
        self._source: Optional[FrameSource] = None
        self._estimator: Optional[KinematicEstimator] = None
        self._t_last_log_s: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._estimator is not None

    @property
    def estimator(self) -> Optional[KinematicEstimator]:
        return self._estimator

    @property
    def mirror(self) -> bool:
        return self._mirror

    @property
    def show_arrows(self) -> bool:
        return self._show_arrows

    def start(self) -> None:
        if self.running:
            logger.warning("start() ignored: session already running")
            return

        detector = self._cfg.detector
        owns = detector is None
        if detector is None:
            detector = create_detector(self._detector_backend, self._detector_params, base_dir=self._cfg.base_dir)
        try:
            factory = self._cfg.source_factory or VideoReader
            source = factory(self._camera_cfg)
        except Exception:
            if owns:
                detector.close()
            raise

        self._detector = detector
        self._owns_detector = owns
        self._source = source
        self._estimator = KinematicEstimator(self._estimator_cfg)
        self._t_last_log_s = None
        logger.info("Session started: source=%s detector=%s", self._camera_cfg.source, self._detector_backend)

    def stop(self) -> None:
        was_running = self.running
        source, detector, owns = self._source, self._detector, self._owns_detector
        self._source = None
        self._detector = None
        self._owns_detector = False
        self._estimator = None
        try:
            if source is not None:
                source.close()
        finally:
            if detector is not None and owns:
                detector.close()
            if was_running:
                logger.info("Session stopped")

    def reset_maxima(self) -> None:
        if self._estimator is None:
            return
        self._estimator.reset_maxima()
        logger.info("Highscore reset")

    def toggle_mirror(self) -> None:
        self._mirror = not self._mirror

    def toggle_arrows(self) -> None:
        self._show_arrows = not self._show_arrows

    def process_frame(self, frame_index: int, timestamp_s: float, frame_bgr: np.ndarray) -> Tuple[HandLandmarks, KinematicsOutput]:
        if self._estimator is None or self._detector is None:
            raise RuntimeError("TrackingSession.process_frame called before start()")

        hand = self._detector.detect(DetectorInput(frame_index=frame_index, timestamp_s=timestamp_s, image_bgr=frame_bgr))
        canvas = CanvasSize.of(frame_bgr)
        self._log_raw(timestamp_s, canvas, hand)

        tip = hand.point(self._landmark_index)
        obs = FrameObservation(
            timestamp_s=float(timestamp_s),
            canvas=canvas,
            visible=tip is not None,
            screen_xyz=tip,
            world_xyz=hand.world_point(self._landmark_index) if tip is not None else None,
        )
        return hand, self._estimator.update(obs)

    def handle_key(self, key: int) -> bool:
        """Apply a preview-window key; returns False when the loop should end."""
        if key in (ord("q"), KEY_ESC):
            return False
        if key == ord("r"):
            self.reset_maxima()
        elif key == ord("m"):
            self.toggle_mirror()
        elif key == ord("a"):
            self.toggle_arrows()
        return True

    def run(self) -> None:
        self.start()
        window = self._overlay_cfg.window_name
        source = self._source
        try:
            for frame_index, t_s, frame_bgr in source or ():
                hand, out = self.process_frame(frame_index, t_s, frame_bgr)
                if not self._overlay_cfg.show:
                    continue
                img = self._renderer.draw(frame_bgr, hand, out, mirror=self._mirror, show_arrows=self._show_arrows)
                cv2.imshow(window, img)
                if not self.handle_key(cv2.waitKey(1) & 0xFF):
                    break
        finally:
            self.stop()
            if self._overlay_cfg.show:
                try:
                    cv2.destroyWindow(window)
                except cv2.error:
                    logger.debug("preview window %s was never created", window)

    def _log_raw(self, t_s: float, canvas: CanvasSize, hand: HandLandmarks) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        if self._t_last_log_s is not None and (t_s - self._t_last_log_s) <= self._raw_log_interval_s:
            return
        self._t_last_log_s = t_s
        logger.debug(
            "detector output: t=%.3f size=%dx%d has_landmarks=%s landmarks0=%s world0=%s",
            t_s,
            canvas.width,
            canvas.height,
            hand.has_hand,
            (hand.landmarks or [])[:5],
            (hand.world_landmarks or [])[:3],
        )
