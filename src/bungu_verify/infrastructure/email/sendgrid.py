import asyncio
from typing import Optional

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from .templates import CODE_SUBJECT, LINK_SUBJECT, render_code_email, render_link_email


class SendGridEmailSender:
    def __init__(
        self,
        api_key: str,
        from_email: str,
        code_ttl_seconds: float = 300,
        link_ttl_seconds: float = 86400,
    ):
        if not api_key:
            raise ValueError("sendgrid api key is required")
        self.api_key = api_key
        self.from_email = from_email
        self.code_ttl_seconds = code_ttl_seconds
        self.link_ttl_seconds = link_ttl_seconds

    async def _send(self, to_email: str, subject: str, html_content: str) -> None:
        # SendGrid client is synchronous; wrap in thread via asyncio to avoid blocking event loop
        client = SendGridAPIClient(self.api_key)
        message = Mail(
            from_email=self.from_email,
            to_emails=to_email,
            subject=subject,
            html_content=html_content,
        )
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, client.send, message)

    async def send_verification_code(self, to_email: str, nickname: str, code: str) -> None:
        """Send the short numeric code for the in-app verification form."""
        html = render_code_email(nickname, code, self.code_ttl_seconds)
        await self._send(to_email, CODE_SUBJECT, html)

    async def send_verification_link(
        self, to_email: str, nickname: str, link: str, tournament_id: Optional[str] = None
    ) -> None:
        """Send the one-time confirmation link."""
        html = render_link_email(nickname, link, tournament_id, self.link_ttl_seconds)
        await self._send(to_email, LINK_SUBJECT, html)
