from email.message import EmailMessage
from email.utils import formataddr
from html import escape

import structlog

from shared.observability import relay_contact_emails_total

from .mailer import MailTransport
from .schemas import ContactRequest

logger = structlog.get_logger(__name__)

PHONE_PLACEHOLDER = "Tidak diisi"

CONTACT_TEMPLATE = """\
<h3>Pesan Baru dari Formulir Kontak Smyva Leather</h3>
<p><b>Nama:</b> {name}</p>
<p><b>Email:</b> {email}</p>
<p><b>Telepon:</b> {phone}</p>
<hr>
<p><b>Pesan:</b></p>
<p>{message}</p>
"""


def _sanitize_header(s: str) -> str:
    # Prevent header injection in Subject/From fields.
    return s.replace("\r", " ").replace("\n", " ").strip()


def render_contact_html(data: ContactRequest) -> str:
    name = f"{data.firstName} {data.lastName}".strip()
    return CONTACT_TEMPLATE.format(
        name=escape(name),
        email=escape(str(data.email)),
        phone=escape(data.phone or PHONE_PLACEHOLDER),
        message=escape(data.message).replace("\n", "<br>"),
    )


class ContactService:
    def __init__(self, transport: MailTransport):
        self.transport = transport

    def build_message(self, data: ContactRequest) -> EmailMessage:
        name = _sanitize_header(f"{data.firstName} {data.lastName}")
        msg = EmailMessage()
        # Gmail rewrites a foreign From, so send as the mailbox and reply to the visitor
        msg["From"] = formataddr((name, self.transport.mailbox))
        msg["Reply-To"] = formataddr((name, str(data.email)))
        msg["To"] = self.transport.mailbox
        msg["Subject"] = _sanitize_header(f"Contact Form: {data.subject}")
        msg.set_content(f"{name} <{data.email}> wrote:\n\n{data.message}")
        msg.add_alternative(render_contact_html(data), subtype="html")
        return msg

    async def send_contact_email(self, data: ContactRequest) -> None:
        try:
            await self.transport.send(self.build_message(data))
        except Exception:
            relay_contact_emails_total.labels(status="failed").inc()
            raise
        relay_contact_emails_total.labels(status="sent").inc()
        logger.info("contact_email_sent", subject=data.subject)
