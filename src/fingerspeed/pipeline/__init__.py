from .session import TrackingSession, TrackingSessionConfig

__all__ = ["TrackingSession", "TrackingSessionConfig"]
