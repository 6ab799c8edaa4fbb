import asyncio
from typing import Optional


class MockEmailSender:
    """Records messages instead of sending them; used when no SendGrid key is configured."""

    def __init__(self, fail_with: Optional[Exception] = None):
        self.sent = []
        self.fail_with = fail_with

    async def send_verification_code(self, to_email: str, nickname: str, code: str) -> None:
        # simulate async send
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append({"type": "code", "to": to_email, "nickname": nickname, "code": code})

    async def send_verification_link(
        self, to_email: str, nickname: str, link: str, tournament_id: Optional[str] = None
    ) -> None:
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(
            {
                "type": "link",
                "to": to_email,
                "nickname": nickname,
                "link": link,
                "tournament_id": tournament_id,
            }
        )
