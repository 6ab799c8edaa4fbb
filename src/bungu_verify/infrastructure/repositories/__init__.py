"""Cache-backed repositories."""

from .version_repository import VersionCounterRepository

__all__ = ["VersionCounterRepository"]
