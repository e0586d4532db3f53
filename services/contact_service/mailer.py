import asyncio
import smtplib
from email.message import EmailMessage
from typing import Protocol

from shared.config.settings import MailSettings
from shared.errors import MailDeliveryError


class MailTransport(Protocol):
    @property
    def mailbox(self) -> str: ...

    async def send(self, message: EmailMessage) -> None: ...


class SmtpMailTransport:
    """Sends through an authenticated SMTP relay (Gmail by default) on a worker thread."""

    def __init__(self, settings: MailSettings, timeout: float = 20.0):
        self.settings = settings
        self.timeout = timeout

    @property
    def mailbox(self) -> str:
        return self.settings.user

    def _send_sync(self, message: EmailMessage) -> None:
        with smtplib.SMTP(host=self.settings.host, port=self.settings.port, timeout=self.timeout) as server:
            if self.settings.use_tls:
                server.starttls()
            server.login(self.settings.user, self.settings.password)
            server.send_message(message)

    async def send(self, message: EmailMessage) -> None:
        try:
            await asyncio.to_thread(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as e:
            raise MailDeliveryError(f"SMTP delivery failed: {e}") from e
