"""Routers package public exports."""

__all__ = [
    "health",
    "verification",
    "version",
]
