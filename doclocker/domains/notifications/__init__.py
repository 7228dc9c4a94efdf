from doclocker.domains.notifications.dispatcher import NotificationDispatcher
from doclocker.domains.notifications.mailer import (
    Mailer, SMTPMailer, LoggingMailer, build_mailer, build_share_message
)

__all__ = [
    "NotificationDispatcher",
    "Mailer", "SMTPMailer", "LoggingMailer",
    "build_mailer", "build_share_message"
]
