from typing import Any, Dict, Optional, Protocol

from ..domain.challenge import SecretGenerator


class ChallengeStore(Protocol):
    """Protocol for verification challenge storage.

    Implementations must make each operation atomic with respect to the others
    on the same subject key.
    """

    namespace: str

    async def issue(
        self,
        subject_key: str,
        metadata: Dict[str, Any],
        secret_generator: SecretGenerator,
        ttl: float,
    ) -> str: ...

    async def verify(self, subject_key: str, candidate: str) -> Dict[str, Any]: ...

    async def sweep_expired(self, now: Optional[float] = None) -> int: ...

    async def attempts_remaining(self, subject_key: str) -> Optional[int]: ...
