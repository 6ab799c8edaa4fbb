"""BUNGU SQUAD email verification service."""

__all__ = [
    "domain",
    "infrastructure",
    "middleware",
    "ports",
    "routers",
    "schemas",
    "services",
    "utils",
]
