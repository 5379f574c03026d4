from .config import load_yaml, parse_alpha, resolve_path, section
from .logging import setup_logging
from .types import (
    Arrow,
    ArrowSet,
    CanvasSize,
    FrameObservation,
    HandLandmarks,
    KinematicsOutput,
    Sample,
    SpeedReadout,
    VelocitySample,
)

__all__ = [
    "Arrow",
    "ArrowSet",
    "CanvasSize",
    "FrameObservation",
    "HandLandmarks",
    "KinematicsOutput",
    "Sample",
    "SpeedReadout",
    "VelocitySample",
    "load_yaml",
    "parse_alpha",
    "resolve_path",
    "section",
    "setup_logging",
]
