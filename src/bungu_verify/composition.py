from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from fastapi import FastAPI

from .config import Settings
from .infrastructure.cache.redis_client import AioredisClient, InMemoryCache
from .infrastructure.email.mock import MockEmailSender
from .infrastructure.stores import InMemoryChallengeStore, RedisChallengeStore
from .logging_config import get_logger
from .services.verification_service import VerificationService, code_policy, link_policy

logger = get_logger(__name__)


@dataclass
class WireResult:
    app: Any
    sweep_task: Optional[asyncio.Task]
    teardown: Any


def resolve_expose_secrets(settings: Settings) -> bool:
    """Secrets are echoed only when explicitly enabled outside production."""
    if not settings.expose_verification_secrets:
        return False
    if settings.is_production:
        logger.warning(
            "expose_verification_secrets_ignored_in_production", app_env=settings.app_env
        )
        return False
    logger.warning("verification_secrets_exposed_in_responses", app_env=settings.app_env)
    return True


def register_clients(
    app: FastAPI,
    settings: Settings,
    cache_client: Any,
    email_sender: Any,
    redis_client: Any = None,
    clock: Callable[[], float] = time.time,
) -> None:
    """Build the challenge stores and services and attach everything to ``app.state``.

    With a ``redis_client`` the stores are Redis-backed and shared across
    workers. Without one they live in this process.
    """

    def _store(namespace: str):
        if redis_client is not None:
            return RedisChallengeStore(
                redis_client,
                namespace=namespace,
                max_attempts=settings.verification_max_attempts,
                expired_grace_seconds=settings.verification_expired_grace_seconds,
                clock=clock,
            )
        return InMemoryChallengeStore(
            namespace=namespace, max_attempts=settings.verification_max_attempts, clock=clock
        )

    expose = resolve_expose_secrets(settings)
    app.state.settings = settings
    app.state.cache_client = cache_client
    app.state.email_sender = email_sender
    app.state.code_verification = VerificationService(
        _store("code"),
        email_sender,
        code_policy(settings.code_ttl_seconds, settings.verification_code_length),
        expose_secrets=expose,
    )
    app.state.link_verification = VerificationService(
        _store("link"),
        email_sender,
        link_policy(settings.link_ttl_seconds),
        expose_secrets=expose,
    )


def register_in_memory_clients(app: FastAPI, settings: Settings) -> None:
    """Process-local defaults so an app is usable before (or without) runtime wiring."""
    register_clients(app, settings, InMemoryCache(), MockEmailSender())


async def sweep_loop(services: list, interval_seconds: float) -> None:
    """Periodically drop expired challenges from every store until cancelled."""
    while True:
        for svc in services:
            try:
                await svc.sweep_expired()
            except Exception as e:
                logger.exception("verification_sweep_failed", flow=svc.flow, error=str(e))
        await asyncio.sleep(interval_seconds)


async def wire_app(app: FastAPI, settings: Settings | None = None) -> WireResult:
    """Runtime wiring: real cache/email clients and the background sweep.

    Must not run at import time; it opens network clients.
    """
    if settings is None:
        settings = getattr(app.state, "settings", None) or Settings()

    cache_client: Any = InMemoryCache()
    redis_client = None
    if settings.redis_url:
        cache_client = AioredisClient(settings.redis_url)
        redis_client = cache_client.client
        logger.info("initialized redis cache client", redis_url=settings.redis_url)

    email_sender: Any = MockEmailSender()
    if settings.sendgrid_api_key:
        from .infrastructure.email.sendgrid import SendGridEmailSender

        email_sender = SendGridEmailSender(
            settings.sendgrid_api_key,
            settings.email_from,
            code_ttl_seconds=settings.code_ttl_seconds,
            link_ttl_seconds=settings.link_ttl_seconds,
        )
    else:
        logger.warning("sendgrid_not_configured_using_mock_sender")

    register_clients(app, settings, cache_client, email_sender, redis_client=redis_client)
    logger.info("initialized email sender and challenge stores")

    sweep_task = asyncio.create_task(
        sweep_loop(
            [app.state.code_verification, app.state.link_verification],
            settings.verification_sweep_interval_seconds,
        )
    )

    async def _teardown():
        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            pass
        try:
            await cache_client.close()
        except Exception as e:
            logger.debug("cache_client_close_failed", error=str(e))

    return WireResult(app=app, sweep_task=sweep_task, teardown=_teardown)
