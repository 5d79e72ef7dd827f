"""Vision detections mapped onto aspect-fit views."""

__version__ = "0.1.0"
