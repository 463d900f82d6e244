"""Fridgy: shared household fridge inventory backed by Firebase."""

__version__ = "1.0.0"
