from __future__ import annotations
import asyncio
import smtplib
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
import structlog
from gateway.config import Settings
from gateway.errors import NotificationError
from gateway.services.email_templates import RenderedEmail

log = structlog.get_logger()


class Mailer:
    """SMTP dispatch. Without relay credentials every send is logged and skipped."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def configured(self) -> bool:
        return self.settings.smtp_configured

    def build_message(self, to: str, email: RenderedEmail) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.settings.email_from
        msg["To"] = to
        msg["Subject"] = email.subject
        msg["Date"] = formatdate(localtime=False)
        msg["Message-ID"] = make_msgid()
        msg.set_content(email.text)
        msg.add_alternative(email.html, subtype="html")
        return msg

    def _send_sync(self, msg: EmailMessage) -> None:
        s = self.settings
        smtp_cls = smtplib.SMTP_SSL if s.smtp_secure else smtplib.SMTP
        with smtp_cls(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout_seconds) as server:
            if not s.smtp_secure:
                server.starttls()
            server.login(s.smtp_user, s.smtp_pass)
            server.send_message(msg)

    async def send(self, to: str, email: RenderedEmail) -> None:
        if not self.configured:
            log.info("email_skipped", to=to, subject=email.subject, text=email.text)
            return
        try:
            msg = self.build_message(to, email)
            await asyncio.to_thread(self._send_sync, msg)
        except (smtplib.SMTPException, OSError, ValueError) as e:
            log.error("email_send_failed", to=to, subject=email.subject, error=str(e))
            raise NotificationError(f"could not send email to {to}") from e
        log.info("email_sent", to=to, subject=email.subject)
