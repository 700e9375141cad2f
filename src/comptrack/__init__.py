"""Component tracking: resolve, validate and record workspace components."""

__version__ = "0.1.0"
