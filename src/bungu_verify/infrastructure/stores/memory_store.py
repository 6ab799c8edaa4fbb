"""In-process challenge store.

State lives in this process only. Use the Redis store when more than one
worker serves requests.
"""

from __future__ import annotations

import asyncio
import hmac
import time
from typing import Any, Callable, Dict, Optional

from ...domain.challenge import SecretGenerator, VerificationChallenge
from ...exceptions import (
    AttemptsExhausted,
    ChallengeExpired,
    ChallengeNotFound,
    CodeMismatch,
    InvalidInput,
)

DEFAULT_MAX_ATTEMPTS = 3


class InMemoryChallengeStore:
    def __init__(
        self,
        namespace: str = "challenge",
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.namespace = namespace
        self.max_attempts = max_attempts
        self.clock = clock
        self._lock = asyncio.Lock()
        self._challenges: dict[str, VerificationChallenge] = {}

    async def issue(
        self,
        subject_key: str,
        metadata: Dict[str, Any],
        secret_generator: SecretGenerator,
        ttl: float,
    ) -> str:
        if not subject_key:
            raise InvalidInput("subject key is required")
        if ttl < 0:
            raise InvalidInput("ttl must not be negative")
        secret = secret_generator()
        async with self._lock:
            now = self.clock()
            self._challenges[subject_key] = VerificationChallenge(
                subject_key=subject_key,
                secret=secret,
                issued_at=now,
                expires_at=now + ttl,
                attempts_remaining=self.max_attempts,
                metadata=dict(metadata or {}),
            )
        return secret

    async def verify(self, subject_key: str, candidate: str) -> Dict[str, Any]:
        async with self._lock:
            challenge = self._challenges.get(subject_key)
            if challenge is None:
                raise ChallengeNotFound()
            if challenge.is_expired(self.clock()):
                del self._challenges[subject_key]
                raise ChallengeExpired()
            if challenge.is_exhausted():
                del self._challenges[subject_key]
                raise AttemptsExhausted()
            if not hmac.compare_digest(challenge.secret.encode(), str(candidate).encode()):
                challenge.attempts_remaining -= 1
                if challenge.attempts_remaining <= 0:
                    del self._challenges[subject_key]
                raise CodeMismatch(attempts_remaining=challenge.attempts_remaining)
            del self._challenges[subject_key]
            return challenge.metadata

    async def sweep_expired(self, now: Optional[float] = None) -> int:
        async with self._lock:
            cutoff = self.clock() if now is None else now
            stale = [k for k, c in self._challenges.items() if c.expires_at <= cutoff]
            for key in stale:
                del self._challenges[key]
        return len(stale)

    async def attempts_remaining(self, subject_key: str) -> Optional[int]:
        async with self._lock:
            challenge = self._challenges.get(subject_key)
            return challenge.attempts_remaining if challenge else None

    def __len__(self) -> int:
        return len(self._challenges)
