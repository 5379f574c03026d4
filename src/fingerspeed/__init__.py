"""Fingertip speed, velocity and acceleration estimation from hand landmarks."""

__version__ = "0.1.0"
