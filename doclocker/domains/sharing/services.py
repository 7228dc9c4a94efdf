import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from doclocker.core.config import Settings
from doclocker.core.exceptions import (
    ExpiredError, ForbiddenError, InternalError, NotFoundError, ValidationError
)
from doclocker.db.repositories.document_repository import DocumentRepository, ShareTokenConflict
from doclocker.db.repositories.user_repository import UserRepository
from doclocker.domains.documents.entities import Document
from doclocker.domains.identity.entities import User
from doclocker.domains.notifications.dispatcher import NotificationDispatcher
from doclocker.domains.sharing.schemas import (
    ShareGrantResponse, SharedDocumentResponse, ShareStatusResponse
)

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_share_token() -> str:
    """256 бит случайности в hex"""
    return secrets.token_hex(32)


def mask_token(token: str) -> str:
    return f"{token[:8]}..."


class ShareService:
    """Выдача, проверка и отзыв ссылок общего доступа.

    Срок действия проверяется только при обращении по ссылке:
    просроченная ссылка остается в БД до повторной выдачи или отзыва.
    """

    def __init__(
        self,
        session: AsyncSession,
        settings: Settings,
        dispatcher: Optional[NotificationDispatcher] = None,
        clock: Optional[Callable[[], datetime]] = None,
        token_factory: Optional[Callable[[], str]] = None
    ):
        self.session = session
        self.settings = settings
        self.dispatcher = dispatcher
        self.clock = clock or utc_now
        self.token_factory = token_factory or generate_share_token
        self.document_repository = DocumentRepository(session)
        self.user_repository = UserRepository(session)

    def build_share_link(self, token: str) -> str:
        return f"{self.settings.frontend_url.rstrip('/')}/shared/{token}"

    def _resolve_ttl(self, ttl_hours: Optional[float]) -> timedelta:
        if ttl_hours is None:
            ttl_hours = self.settings.share_default_ttl_hours

        if not 0 < ttl_hours <= self.settings.share_max_ttl_hours:
            raise ValidationError(
                f"ttl_hours must be greater than 0 and at most {self.settings.share_max_ttl_hours}"
            )
        return timedelta(hours=ttl_hours)

    async def _get_owned_document(self, document_uuid: uuid.UUID, requester: User) -> Document:
        document = await self.document_repository.get_by_uuid(document_uuid)

        if not document:
            logger.warning(f"Share request for non-existent document: {document_uuid}")
            raise NotFoundError("Document not found")

        if not document.is_owned_by(requester.uuid):
            logger.warning(f"Unauthorized share attempt by {requester.email} on document {document_uuid}")
            raise ForbiddenError("Not authorized to share this document")

        return document

    async def _fresh_token(self) -> Optional[str]:
        token = self.token_factory()
        if await self.document_repository.share_token_exists(token):
            logger.warning(f"Share token collision detected: {mask_token(token)}")
            return None
        return token

    async def issue_grant(
        self,
        document_uuid: uuid.UUID,
        requester: User,
        recipient_email: Optional[str] = None,
        ttl_hours: Optional[float] = None
    ) -> ShareGrantResponse:
        """Выдача новой ссылки; предыдущая ссылка документа перестает работать"""
        document = await self._get_owned_document(document_uuid, requester)
        ttl = self._resolve_ttl(ttl_hours)

        saved = None
        for attempt in range(1, self.settings.share_token_max_attempts + 1):
            token = await self._fresh_token()
            if token is None:
                continue

            now = self.clock()
            document.grant_share(token, now + ttl, now, recipient_email)
            try:
                saved = await self.document_repository.update(document)
            except ShareTokenConflict:
                logger.warning(f"Share token conflict on save (attempt {attempt}) for document {document.uuid}")
                continue

            if saved is None:
                logger.warning(f"Document {document.uuid} was deleted while issuing a share link")
                raise NotFoundError("Document not found")
            break

        if saved is None:
            logger.error(f"Could not generate a unique share token for document {document.uuid}")
            raise InternalError("Could not generate a unique share link, please try again")

        grant = saved.share
        share_link = self.build_share_link(grant.token)
        logger.info(
            f"Share link {mask_token(grant.token)} issued for document {saved.uuid} "
            f"by {requester.email}, expires at {grant.expires_at.isoformat()}"
        )

        if recipient_email and self.dispatcher is not None:
            self.dispatcher.dispatch(recipient_email, requester.name, saved.title, share_link)

        return ShareGrantResponse(token=grant.token, expires_at=grant.expires_at, share_link=share_link)

    async def resolve_grant(self, token: str) -> SharedDocumentResponse:
        """Открытие документа по ссылке без аутентификации"""
        document = await self.document_repository.get_by_share_token(token) if token else None

        if not document or document.share is None:
            logger.warning(f"Shared document not found for token {mask_token(token or '')}")
            raise NotFoundError("Document not found or link expired")

        if document.share.is_expired(self.clock()):
            logger.info(f"Expired share link accessed: {mask_token(token)}")
            raise ExpiredError("Share link has expired")

        owner = await self.user_repository.get_by_uuid(document.owner_id)
        logger.info(f"Shared document accessed: {document.title}")

        return SharedDocumentResponse(
            title=document.title,
            category=document.category,
            description=document.description,
            file_name=document.file.name,
            file_type=document.file.content_type,
            file_size=document.file.size,
            file_data=document.file.data,
            owner_name=owner.name if owner else "Unknown",
            shared_at=document.share.issued_at
        )

    async def revoke_grant(self, document_uuid: uuid.UUID, requester: User) -> None:
        """Отзыв ссылки; повторный отзыв ничего не меняет"""
        document = await self._get_owned_document(document_uuid, requester)
        was_shared = document.is_shared

        document.revoke_share()
        await self.document_repository.update(document)

        if was_shared:
            logger.info(f"Share link revoked for document {document.uuid} by {requester.email}")

    async def share_status(self, document_uuid: uuid.UUID, requester: User) -> ShareStatusResponse:
        """Состояние ссылки документа для владельца"""
        document = await self._get_owned_document(document_uuid, requester)
        grant = document.share

        if grant is None:
            return ShareStatusResponse(is_shared=False)

        return ShareStatusResponse(
            is_shared=True,
            expires_at=grant.expires_at,
            is_expired=grant.is_expired(self.clock()),
            share_link=self.build_share_link(grant.token),
            shared_with=sorted(grant.notified_emails)
        )
