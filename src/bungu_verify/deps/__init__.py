"""Dependency injection for FastAPI.

- providers: accessors for the clients and services wired onto app.state
- rate_limit: per-client rate limiting
"""

from .providers import (
    get_cache_from_request,
    get_code_verification_service,
    get_link_verification_service,
    get_settings,
    get_version_repo,
)
from .rate_limit import enforce_rate_limit, require_rate_limit

__all__ = [
    "get_settings",
    "get_cache_from_request",
    "get_code_verification_service",
    "get_link_verification_service",
    "get_version_repo",
    "enforce_rate_limit",
    "require_rate_limit",
]
