import sys
from pathlib import Path

# Ensure the project's src directory (and tests.* helpers) are importable
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))
sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402

from bungu_verify.config import Settings  # noqa: E402
from bungu_verify.infrastructure.cache.redis_client import InMemoryCache  # noqa: E402
from bungu_verify.infrastructure.email.mock import MockEmailSender  # noqa: E402
from bungu_verify.infrastructure.stores import InMemoryChallengeStore  # noqa: E402


class FakeClock:
    """Manually advanced epoch clock for expiry tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryChallengeStore(namespace="test", max_attempts=3, clock=clock)


@pytest.fixture
def cache(clock):
    """Return an explicit InMemoryCache instance for tests."""
    return InMemoryCache(clock=clock)


@pytest.fixture
def email_sender():
    return MockEmailSender()


@pytest.fixture
def settings():
    # explicit values so a developer's .env or environment can't leak into tests
    return Settings(
        _env_file=None,
        app_env="test",
        redis_url="",
        sendgrid_api_key="",
        frontend_url="http://app.test",
        api_base_url="http://api.test",
        expose_verification_secrets=False,
        rate_limit_calls=5,
        rate_limit_period=60,
    )


@pytest.fixture
def test_app(settings, cache, email_sender, clock):
    """Yield (app, email_sender) wired with in-memory clients and the fake clock."""
    from tests.fixtures.app_factory import create_test_app

    app = create_test_app(settings=settings, cache=cache, email_sender=email_sender, clock=clock)
    yield app, email_sender
