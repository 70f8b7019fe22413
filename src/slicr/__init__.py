"""Slicr - silence removal and voice-over finishing pipeline."""

__version__ = "0.1.0"
