"""Redis-backed challenge store.

Each challenge is a hash at ``{prefix}{namespace}:{subject_key}`` carrying a
native expiry of ``ttl + expired_grace_seconds``. The grace period lets
``verify`` still tell "expired" apart from "never issued". Redis drops the
key on its own afterwards. Verify and sweep run as Lua scripts, so every
read-check-mutate-delete sequence is atomic across processes.
"""

from __future__ import annotations

import json
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
from .memory_store import DEFAULT_MAX_ATTEMPTS

KEY_PREFIX = "bungu:challenge:"

# KEYS[1] = challenge key; ARGV[1] = candidate, ARGV[2] = now
VERIFY_SCRIPT = """
local f = redis.call('HMGET', KEYS[1], 'secret', 'expires_at', 'attempts_remaining', 'metadata')
if not f[1] then
  return {'not_found'}
end
if tonumber(ARGV[2]) >= tonumber(f[2]) then
  redis.call('DEL', KEYS[1])
  return {'expired'}
end
if tonumber(f[3]) <= 0 then
  redis.call('DEL', KEYS[1])
  return {'exhausted'}
end
if f[1] ~= ARGV[1] then
  local remaining = redis.call('HINCRBY', KEYS[1], 'attempts_remaining', -1)
  if remaining <= 0 then
    redis.call('DEL', KEYS[1])
  end
  return {'mismatch', tostring(remaining)}
end
redis.call('DEL', KEYS[1])
return {'ok', f[4]}
"""

# KEYS[1] = challenge key; ARGV[1] = cutoff
SWEEP_SCRIPT = """
local exp = redis.call('HGET', KEYS[1], 'expires_at')
if exp and tonumber(exp) <= tonumber(ARGV[1]) then
  redis.call('DEL', KEYS[1])
  return 1
end
return 0
"""


def _text(value: Any) -> str:
    return value.decode() if isinstance(value, bytes) else str(value)


class RedisChallengeStore:
    def __init__(
        self,
        client: Any,
        namespace: str = "challenge",
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        expired_grace_seconds: float = 300,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.client = client
        self.namespace = namespace
        self.max_attempts = max_attempts
        self.expired_grace_seconds = expired_grace_seconds
        self.clock = clock
        self._verify = client.register_script(VERIFY_SCRIPT)
        self._sweep = client.register_script(SWEEP_SCRIPT)

    def _key(self, subject_key: str) -> str:
        return f"{KEY_PREFIX}{self.namespace}:{subject_key}"

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
        now = self.clock()
        challenge = VerificationChallenge(
            subject_key=subject_key,
            secret=secret,
            issued_at=now,
            expires_at=now + ttl,
            attempts_remaining=self.max_attempts,
            metadata=dict(metadata or {}),
        )
        key = self._key(subject_key)
        expire_ms = max(1, int((ttl + self.expired_grace_seconds) * 1000))
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.delete(key)
            pipe.hset(key, mapping=challenge.to_mapping())
            pipe.pexpire(key, expire_ms)
            await pipe.execute()
        return secret

    async def verify(self, subject_key: str, candidate: str) -> Dict[str, Any]:
        result = await self._verify(
            keys=[self._key(subject_key)], args=[str(candidate), repr(self.clock())]
        )
        outcome = _text(result[0])
        if outcome == "ok":
            raw = _text(result[1]) if len(result) > 1 and result[1] else ""
            return json.loads(raw) if raw else {}
        if outcome == "mismatch":
            raise CodeMismatch(attempts_remaining=max(0, int(_text(result[1]))))
        if outcome == "expired":
            raise ChallengeExpired()
        if outcome == "exhausted":
            raise AttemptsExhausted()
        raise ChallengeNotFound()

    async def sweep_expired(self, now: Optional[float] = None) -> int:
        cutoff = self.clock() if now is None else now
        removed = 0
        async for key in self.client.scan_iter(match=f"{KEY_PREFIX}{self.namespace}:*"):
            removed += int(await self._sweep(keys=[key], args=[repr(cutoff)]))
        return removed

    async def attempts_remaining(self, subject_key: str) -> Optional[int]:
        v = await self.client.hget(self._key(subject_key), "attempts_remaining")
        return int(_text(v)) if v is not None else None
