"""Request-scoped accessors for the collaborators wired onto ``app.state``.

Everything is constructed once by the composition root (or by a test) and
attached to the application; nothing here creates process-wide singletons.
"""

from typing import Any

from fastapi import HTTPException, Request

from ..config import Settings
from ..infrastructure.repositories.version_repository import VersionCounterRepository
from ..services.verification_service import VerificationService


def _state(request: Request, name: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(status_code=503, detail=f"{name} is not configured")
    return value


def get_settings(request: Request) -> Settings:
    return _state(request, "settings")


def get_cache_from_request(request: Request):
    """Get cache client from request.app.state."""
    return _state(request, "cache_client")


def get_code_verification_service(request: Request) -> VerificationService:
    return _state(request, "code_verification")


def get_link_verification_service(request: Request) -> VerificationService:
    return _state(request, "link_verification")


def get_version_repo(request: Request) -> VersionCounterRepository:
    return VersionCounterRepository(get_cache_from_request(request))
