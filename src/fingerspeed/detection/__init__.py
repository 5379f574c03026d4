from .base import INDEX_FINGER_TIP, DetectorInput, HandDetector
from .mock import MockDetector
from .registry import create_detector

__all__ = ["INDEX_FINGER_TIP", "DetectorInput", "HandDetector", "MockDetector", "create_detector"]
