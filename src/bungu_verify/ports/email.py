from typing import Optional, Protocol


class EmailSender(Protocol):
    """Protocol for email sending operations."""

    async def send_verification_code(self, to_email: str, nickname: str, code: str) -> None: ...
    async def send_verification_link(
        self, to_email: str, nickname: str, link: str, tournament_id: Optional[str] = None
    ) -> None: ...
