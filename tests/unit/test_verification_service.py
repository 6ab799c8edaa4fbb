from urllib.parse import parse_qs, urlparse

import pytest

from bungu_verify.composition import resolve_expose_secrets
from bungu_verify.config import Settings
from bungu_verify.domain.challenge import ChallengePolicy
from bungu_verify.exceptions import (
    ChallengeExpired,
    ChallengeNotFound,
    CodeMismatch,
    DeliveryFailure,
    InvalidInput,
)
from bungu_verify.infrastructure.email.mock import MockEmailSender
from bungu_verify.services.verification_service import (
    VerificationService,
    code_policy,
    link_policy,
)


def fixed_policy(secret: str, ttl: float = 300) -> ChallengePolicy:
    return ChallengePolicy(name="code", ttl_seconds=ttl, secret_factory=lambda: secret)


@pytest.mark.asyncio
async def test_send_code_stores_and_emails(store, email_sender):
    svc = VerificationService(store, email_sender, fixed_policy("4821"))
    issued = await svc.send_code("alice@example.com", "Alice")

    assert issued.secret == "4821"
    assert issued.delivered is True
    assert email_sender.sent == [
        {"type": "code", "to": "alice@example.com", "nickname": "Alice", "code": "4821"}
    ]


@pytest.mark.asyncio
async def test_code_flow_scenario(store, email_sender):
    svc = VerificationService(store, email_sender, fixed_policy("4821"))
    await svc.send_code("alice@example.com", "Alice")

    with pytest.raises(CodeMismatch) as exc:
        await svc.verify("alice@example.com", "0000")
    assert exc.value.attempts_remaining == 2

    user = await svc.verify("alice@example.com", "4821")
    assert user == {"email": "alice@example.com", "nickname": "Alice"}

    with pytest.raises(ChallengeNotFound):
        await svc.verify("alice@example.com", "4821")


@pytest.mark.asyncio
async def test_expired_code_scenario(store, email_sender, clock):
    svc = VerificationService(store, email_sender, fixed_policy("4821", ttl=300))
    await svc.send_code("alice@example.com", "Alice")
    clock.advance(301)

    with pytest.raises(ChallengeExpired):
        await svc.verify("alice@example.com", "4821")
    with pytest.raises(ChallengeNotFound):
        await svc.verify("alice@example.com", "4821")


@pytest.mark.asyncio
async def test_delivery_failure_keeps_challenge(store):
    sender = MockEmailSender(fail_with=RuntimeError("smtp down"))
    svc = VerificationService(store, sender, fixed_policy("4821"))

    issued = await svc.send_code("alice@example.com", "Alice")
    assert issued.delivered is False
    assert isinstance(issued.failure, DeliveryFailure)
    assert str(issued.failure.cause) == "smtp down"
    assert await svc.verify("alice@example.com", "4821") == {
        "email": "alice@example.com",
        "nickname": "Alice",
    }


@pytest.mark.asyncio
async def test_email_is_normalised(store, email_sender):
    svc = VerificationService(store, email_sender, fixed_policy("4821"))
    await svc.send_code("  Alice@Example.COM ", " Alice ")
    user = await svc.verify("alice@example.com", "4821")
    assert user == {"email": "alice@example.com", "nickname": "Alice"}


@pytest.mark.asyncio
async def test_numeric_candidate_is_accepted(store, email_sender):
    svc = VerificationService(store, email_sender, fixed_policy("4821"))
    await svc.send_code("alice@example.com", "Alice")
    assert (await svc.verify("alice@example.com", 4821))["nickname"] == "Alice"


@pytest.mark.parametrize(
    "email,nickname",
    [("", "Alice"), ("alice@example.com", ""), (None, "Alice"), ("alice@example.com", "   ")],
)
@pytest.mark.asyncio
async def test_send_code_requires_email_and_nickname(store, email_sender, email, nickname):
    svc = VerificationService(store, email_sender, fixed_policy("4821"))
    with pytest.raises(InvalidInput):
        await svc.send_code(email, nickname)
    assert email_sender.sent == []


@pytest.mark.asyncio
async def test_verify_requires_email_and_code(store, email_sender):
    svc = VerificationService(store, email_sender, fixed_policy("4821"))
    with pytest.raises(InvalidInput):
        await svc.verify("alice@example.com", "")
    with pytest.raises(InvalidInput):
        await svc.verify(None, "4821")


@pytest.mark.asyncio
async def test_send_link_builds_confirm_url(store, email_sender):
    svc = VerificationService(store, email_sender, link_policy())
    issued = await svc.send_link("bob@example.com", "Bob", "https://api.test/", tournament_id="7")

    assert len(issued.secret) == 64
    sent = email_sender.sent[0]
    assert sent["type"] == "link"
    assert sent["tournament_id"] == "7"
    url = urlparse(sent["link"])
    assert f"{url.scheme}://{url.netloc}{url.path}" == "https://api.test/api/verify-email"
    query = parse_qs(url.query)
    assert query == {"token": [issued.secret], "email": ["bob@example.com"]}

    entry = await svc.verify("bob@example.com", issued.secret)
    assert entry == {"email": "bob@example.com", "nickname": "Bob", "tournament_id": "7"}


@pytest.mark.asyncio
async def test_default_code_policy_issues_four_digits(store, email_sender):
    svc = VerificationService(store, email_sender, code_policy())
    issued = await svc.send_code("alice@example.com", "Alice")
    assert len(issued.secret) == 4 and issued.secret.isdigit()


@pytest.mark.asyncio
async def test_sweep_expired_delegates_to_store(store, email_sender, clock):
    svc = VerificationService(store, email_sender, fixed_policy("1", ttl=5))
    await svc.send_code("a@example.com", "A")
    await svc.send_code("b@example.com", "B")
    clock.advance(5)
    assert await svc.sweep_expired() == 2


def test_expose_secrets_requires_flag_and_non_production():
    assert resolve_expose_secrets(Settings(_env_file=None, app_env="development")) is False
    assert (
        resolve_expose_secrets(
            Settings(_env_file=None, app_env="development", expose_verification_secrets=True)
        )
        is True
    )
    assert (
        resolve_expose_secrets(
            Settings(_env_file=None, app_env="production", expose_verification_secrets=True)
        )
        is False
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("candidate", [" 4821", "4821\n", " 4821\n", "04821"])
async def test_padded_code_is_a_mismatch(store, email_sender, candidate):
    svc = VerificationService(store, email_sender, fixed_policy("4821"))
    await svc.send_code("alice@example.com", "Alice")

    with pytest.raises(CodeMismatch) as exc:
        await svc.verify("alice@example.com", candidate)
    assert exc.value.attempts_remaining == 2


class _RaisingOnCallSender(MockEmailSender):
    """Sender whose methods fail before handing back an awaitable."""

    def send_verification_code(self, to_email, nickname, code):
        raise ConnectionError("no route to smtp host")

    def send_verification_link(self, to_email, nickname, link, tournament_id=None):
        raise ConnectionError("no route to smtp host")


@pytest.mark.asyncio
async def test_sender_failing_at_call_time_is_reported_not_raised(store):
    svc = VerificationService(store, _RaisingOnCallSender(), fixed_policy("4821"))

    issued = await svc.send_code("alice@example.com", "Alice")
    assert issued.delivered is False
    assert isinstance(issued.failure.cause, ConnectionError)
    assert (await svc.verify("alice@example.com", "4821"))["nickname"] == "Alice"

    link_svc = VerificationService(store, _RaisingOnCallSender(), link_policy())
    issued = await link_svc.send_link("bob@example.com", "Bob", "https://api.test")
    assert issued.delivered is False
