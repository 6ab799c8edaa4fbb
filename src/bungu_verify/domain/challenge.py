"""Verification challenge domain model."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ..exceptions import DeliveryFailure

SecretGenerator = Callable[[], str]


@dataclass(slots=True)
class VerificationChallenge:
    """A secret bound to a subject with an expiry and an attempt budget."""

    subject_key: str
    secret: str
    issued_at: float
    expires_at: float
    attempts_remaining: int
    metadata: Dict[str, Any] = field(default_factory=dict)

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def is_exhausted(self) -> bool:
        return self.attempts_remaining <= 0

    def to_mapping(self) -> Dict[str, str]:
        """Flatten into string fields (the Redis hash layout)."""
        return {
            "secret": self.secret,
            "issued_at": repr(self.issued_at),
            "expires_at": repr(self.expires_at),
            "attempts_remaining": str(self.attempts_remaining),
            "metadata": json.dumps(self.metadata),
        }


@dataclass(slots=True, frozen=True)
class ChallengePolicy:
    """Per-flow parameters: how long a challenge lives and what its secret looks like."""

    name: str
    ttl_seconds: float
    secret_factory: SecretGenerator


@dataclass(slots=True)
class IssueResult:
    """Outcome of issuing a challenge and attempting delivery."""

    secret: str
    failure: Optional[DeliveryFailure] = None

    @property
    def delivered(self) -> bool:
        return self.failure is None
