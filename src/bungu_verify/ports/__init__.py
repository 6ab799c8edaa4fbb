"""Ports package - defines interfaces for external dependencies."""

from .challenge_store import ChallengeStore
from .email import EmailSender

__all__ = [
    "ChallengeStore",
    "EmailSender",
]
