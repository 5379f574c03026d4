from .arrows import ArrowConfig, acceleration_arrow, arrow_geometry, velocity_arrow
from .estimator import KinematicEstimator, KinematicEstimatorConfig
from .units import norm_to_px_speed

__all__ = [
    "ArrowConfig",
    "KinematicEstimator",
    "KinematicEstimatorConfig",
    "acceleration_arrow",
    "arrow_geometry",
    "norm_to_px_speed",
    "velocity_arrow",
]
