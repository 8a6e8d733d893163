"""CLI command groups for native-audio."""

__all__ = [
    "config",
    "detect",
    "load",
]
