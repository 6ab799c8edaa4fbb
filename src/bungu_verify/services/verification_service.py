from typing import Any, Awaitable, Callable, Dict, Optional
from urllib.parse import urlencode

from ..domain.challenge import ChallengePolicy, IssueResult
from ..exceptions import DeliveryFailure, InvalidInput, VerificationError
from ..logging_config import get_logger
from ..metrics import (
    CHALLENGES_ISSUED,
    CHALLENGES_SWEPT,
    EMAIL_DELIVERY_FAILURES,
    VERIFICATION_ATTEMPTS,
)
from ..ports.challenge_store import ChallengeStore
from ..ports.email import EmailSender
from ..utils.codes import code_generator, token_generator

logger = get_logger(__name__)

VERIFY_EMAIL_PATH = "/api/verify-email"


def code_policy(ttl_seconds: float = 300, length: int = 4) -> ChallengePolicy:
    return ChallengePolicy(
        name="code", ttl_seconds=ttl_seconds, secret_factory=code_generator(length)
    )


def link_policy(ttl_seconds: float = 86400, nbytes: int = 32) -> ChallengePolicy:
    return ChallengePolicy(
        name="link", ttl_seconds=ttl_seconds, secret_factory=token_generator(nbytes)
    )


def normalize_email(email: Any) -> str:
    if not isinstance(email, str):
        return ""
    return email.strip().lower()


def _clean(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _candidate(value: Any) -> str:
    # compared verbatim; a JSON number is the only accepted conversion
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value if isinstance(value, str) else ""


class VerificationService:
    """Issues, delivers and checks email verification challenges for one flow.

    The store does the bookkeeping and the email sender does the delivery. A
    failed delivery is logged and handed back as ``IssueResult.failure``.
    The stored challenge stays valid either way.
    """

    def __init__(
        self,
        store: ChallengeStore,
        email_sender: EmailSender,
        policy: ChallengePolicy,
        expose_secrets: bool = False,
    ):
        self.store = store
        self.email_sender = email_sender
        self.policy = policy
        self.expose_secrets = expose_secrets

    @property
    def flow(self) -> str:
        return self.policy.name

    async def _issue(self, email: str, metadata: Dict[str, Any]) -> str:
        secret = await self.store.issue(
            email, metadata, self.policy.secret_factory, self.policy.ttl_seconds
        )
        if CHALLENGES_ISSUED is not None:
            CHALLENGES_ISSUED.labels(flow=self.flow).inc()
        logger.info(
            "verification_challenge_issued",
            flow=self.flow,
            email=email,
            ttl_seconds=self.policy.ttl_seconds,
        )
        return secret

    async def _deliver(
        self, email: str, send: Callable[[], Awaitable[None]]
    ) -> Optional[DeliveryFailure]:
        try:
            await send()
        except Exception as e:
            if EMAIL_DELIVERY_FAILURES is not None:
                EMAIL_DELIVERY_FAILURES.labels(kind=self.flow).inc()
            logger.warning(
                "verification_email_delivery_failed", flow=self.flow, email=email, error=str(e)
            )
            return DeliveryFailure(email, cause=e)
        return None

    async def send_code(self, email: Any, nickname: Any) -> IssueResult:
        email, nickname = normalize_email(email), _clean(nickname)
        if not email or not nickname:
            raise InvalidInput("Email and nickname are required")
        secret = await self._issue(email, {"email": email, "nickname": nickname})
        failure = await self._deliver(
            email, lambda: self.email_sender.send_verification_code(email, nickname, secret)
        )
        return IssueResult(secret=secret, failure=failure)

    def build_link(self, base_url: str, email: str, token: str) -> str:
        query = urlencode({"token": token, "email": email})
        return f"{base_url.rstrip('/')}{VERIFY_EMAIL_PATH}?{query}"

    async def send_link(
        self,
        email: Any,
        nickname: Any,
        base_url: str,
        tournament_id: Optional[str] = None,
    ) -> IssueResult:
        email, nickname = normalize_email(email), _clean(nickname)
        if not email or not nickname:
            raise InvalidInput("Email and nickname are required")
        metadata: Dict[str, Any] = {"email": email, "nickname": nickname}
        if tournament_id:
            metadata["tournament_id"] = str(tournament_id)
        token = await self._issue(email, metadata)
        link = self.build_link(base_url, email, token)
        failure = await self._deliver(
            email,
            lambda: self.email_sender.send_verification_link(
                email, nickname, link, metadata.get("tournament_id")
            ),
        )
        return IssueResult(secret=token, failure=failure)

    async def verify(self, email: Any, candidate: Any) -> Dict[str, Any]:
        """Check ``candidate`` against the live challenge for ``email``.

        Returns the metadata stored at issue time. Raises a
        ``VerificationError`` subclass on every failure.
        """
        email, candidate = normalize_email(email), _candidate(candidate)
        if not email or not candidate:
            raise InvalidInput("Email and code are required")
        try:
            metadata = await self.store.verify(email, candidate)
        except VerificationError as e:
            if VERIFICATION_ATTEMPTS is not None:
                VERIFICATION_ATTEMPTS.labels(flow=self.flow, result=e.kind).inc()
            logger.info(
                "verification_failed",
                flow=self.flow,
                email=email,
                reason=e.kind,
                attempts_remaining=getattr(e, "attempts_remaining", None),
            )
            raise
        if VERIFICATION_ATTEMPTS is not None:
            VERIFICATION_ATTEMPTS.labels(flow=self.flow, result="success").inc()
        logger.info("verification_succeeded", flow=self.flow, email=email)
        return metadata

    async def sweep_expired(self) -> int:
        removed = await self.store.sweep_expired()
        if removed and CHALLENGES_SWEPT is not None:
            CHALLENGES_SWEPT.inc(removed)
        logger.info("verification_sweep_completed", flow=self.flow, removed=removed)
        return removed
