"""Verification error taxonomy.

Every error here is an expected, client-facing outcome and carries the HTTP
status the routers answer with.
"""

from typing import Optional


class VerificationError(Exception):
    """Base verification error with HTTP status."""

    kind = "verification_error"

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InvalidInput(VerificationError):
    kind = "invalid_input"


class ChallengeNotFound(VerificationError):
    kind = "not_found"

    def __init__(self, message: str = "No verification code found for this email"):
        super().__init__(message)


class ChallengeExpired(VerificationError):
    kind = "expired"

    def __init__(self, message: str = "Verification code has expired"):
        super().__init__(message)


class AttemptsExhausted(VerificationError):
    kind = "attempts_exhausted"

    def __init__(self, message: str = "Too many failed attempts"):
        super().__init__(message)


class CodeMismatch(VerificationError):
    kind = "mismatch"

    def __init__(self, attempts_remaining: int, message: str = "Invalid verification code"):
        super().__init__(message)
        self.attempts_remaining = attempts_remaining


class DeliveryFailure(VerificationError):
    """The email collaborator failed. Logged by the service, never raised to clients."""

    kind = "delivery_failure"

    def __init__(self, recipient: str, cause: Optional[BaseException] = None):
        super().__init__(f"failed to deliver verification email to {recipient}", status_code=502)
        self.recipient = recipient
        self.cause = cause


__all__ = [
    "VerificationError",
    "InvalidInput",
    "ChallengeNotFound",
    "ChallengeExpired",
    "AttemptsExhausted",
    "CodeMismatch",
    "DeliveryFailure",
]
