"""WheelMate - accessible facility discovery API."""

__version__ = "1.0.0"
