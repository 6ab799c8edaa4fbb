"""Schema exports for API request/response models."""

from .verification import (
    SendLinkRequest,
    SendResponse,
    UserData,
    VerificationRequest,
    VerifyResponse,
    VersionResponse,
)

__all__ = [
    "VerificationRequest",
    "SendLinkRequest",
    "SendResponse",
    "UserData",
    "VerifyResponse",
    "VersionResponse",
]
