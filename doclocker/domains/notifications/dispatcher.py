import asyncio
import logging
from typing import Set

from doclocker.domains.notifications.mailer import Mailer, build_share_message

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Доставка уведомлений о ссылках по принципу best-effort.

    Ошибки отправки записываются в лог и никогда не пробрасываются
    вызывающему коду: ссылка действительна, даже если письмо не дошло.
    """

    def __init__(self, mailer: Mailer, from_email: str):
        self.mailer = mailer
        self.from_email = from_email
        self._pending: Set[asyncio.Task] = set()

    async def notify(
        self,
        recipient_email: str,
        sender_name: str,
        document_title: str,
        share_link: str
    ) -> bool:
        """Отправка письма; True при успехе"""
        message = build_share_message(
            self.from_email, recipient_email, sender_name, document_title, share_link
        )
        try:
            await self.mailer.send(message)
        except Exception as exc:
            logger.error(f"Failed to send share notification to {recipient_email}: {exc}")
            return False

        logger.info(f"Share notification sent to {recipient_email}")
        return True

    def dispatch(
        self,
        recipient_email: str,
        sender_name: str,
        document_title: str,
        share_link: str
    ) -> asyncio.Task:
        """Запуск отправки без ожидания результата"""
        task = asyncio.create_task(
            self.notify(recipient_email, sender_name, document_title, share_link)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Ожидание незавершенных отправок (при остановке приложения)"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
