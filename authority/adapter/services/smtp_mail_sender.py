import asyncio
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from authority.app.services.mail_sender import DeliveryResult, MailSender, redact_email

logger = logging.getLogger(__name__)


class SmtpMailSender(MailSender):
    """SMTP implementation of MailSender; the blocking client runs in a worker thread."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        user: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        from_email: Optional[str] = None,
        from_name: str = "Identity Authority",
        timeout_seconds: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.from_email = from_email or user or "noreply@localhost"
        self.from_name = from_name
        self.timeout_seconds = timeout_seconds

    def _build(self, to: str, subject: str, html_body: str, text_body: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to
        msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))
        return msg

    def _send_sync(self, to: str, msg: MIMEMultipart) -> None:
        context = ssl.create_default_context()
        if self.use_tls:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout_seconds) as server:
                server.starttls(context=context)
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.sendmail(self.from_email, to, msg.as_string())
        else:
            with smtplib.SMTP_SSL(
                self.host, self.port, context=context, timeout=self.timeout_seconds
            ) as server:
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.sendmail(self.from_email, to, msg.as_string())

    async def send(
        self, to: str, subject: str, html_body: str, text_body: str
    ) -> DeliveryResult:
        msg = self._build(to, subject, html_body, text_body)
        try:
            await asyncio.to_thread(self._send_sync, to, msg)
        except (smtplib.SMTPException, ssl.SSLError, OSError) as exc:
            logger.error(
                f"SMTP delivery to {redact_email(to)} via {self.host}:{self.port} failed: "
                f"{type(exc).__name__}"
            )
            return DeliveryResult(delivered=False, detail=type(exc).__name__)

        logger.info(f"Email sent to {redact_email(to)}: {subject}")
        return DeliveryResult(delivered=True, message_id=msg["Message-ID"])
