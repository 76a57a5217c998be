"""VerneMQ webhook bridge for channel access decisions."""

__version__ = "0.1.0"

__all__ = ["__version__"]
