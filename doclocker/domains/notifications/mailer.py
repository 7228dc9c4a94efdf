"""Отправка писем: SMTP или только запись в лог"""
import asyncio
import logging
import smtplib
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from doclocker.core.config import Settings

logger = logging.getLogger(__name__)


def build_share_message(
    from_email: str,
    recipient_email: str,
    sender_name: str,
    document_title: str,
    share_link: str
) -> MIMEMultipart:
    """Письмо-уведомление о том, что документом поделились"""
    msg = MIMEMultipart("alternative")
    msg["From"] = from_email
    msg["To"] = recipient_email
    msg["Subject"] = f"{sender_name} shared a document with you"

    text = (
        f"{sender_name} has shared a document with you through Digital Document Locker.\n\n"
        f"Document: {document_title}\n\n"
        f"Open it here: {share_link}\n"
    )
    html = (
        "<html><body>"
        f"<p><strong>{escape(sender_name)}</strong> has shared a document with you "
        "through Digital Document Locker.</p>"
        f"<p><strong>Document Title:</strong> {escape(document_title)}</p>"
        f'<p><a href="{escape(share_link)}">View Document</a></p>'
        f"<p>Or copy and paste this link in your browser:<br>{escape(share_link)}</p>"
        "</body></html>"
    )
    msg.attach(MIMEText(text, "plain"))
    msg.attach(MIMEText(html, "html"))
    return msg


class Mailer(ABC):
    @abstractmethod
    async def send(self, message: MIMEMultipart) -> None:
        ...


class SMTPMailer(Mailer):
    """Отправка через SMTP в отдельном потоке"""

    def __init__(self, host: str, port: int, user: str = "", password: str = "", use_tls: bool = True):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls

    def _send_sync(self, message: MIMEMultipart) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.user and self.password:
                smtp.login(self.user, self.password)
            smtp.send_message(message)

    async def send(self, message: MIMEMultipart) -> None:
        await asyncio.to_thread(self._send_sync, message)


class LoggingMailer(Mailer):
    """Используется, когда SMTP не настроен"""

    async def send(self, message: MIMEMultipart) -> None:
        logger.info(f"SMTP not configured, email to {message['To']} not sent: {message['Subject']}")


def build_mailer(settings: Settings) -> Mailer:
    if not settings.smtp_host:
        return LoggingMailer()
    return SMTPMailer(
        host=settings.smtp_host,
        port=settings.smtp_port,
        user=settings.smtp_user,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls
    )
