import base64
import logging
import uuid
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from doclocker.core.config import Settings
from doclocker.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from doclocker.db.repositories.document_repository import DocumentRepository
from doclocker.domains.documents.entities import ALLOWED_FILE_TYPES, Document, StoredFile
from doclocker.domains.documents.schemas import DocumentCreate, DocumentUpdate
from doclocker.domains.identity.entities import User

logger = logging.getLogger(__name__)


class DocumentService:
    """Сервис для работы с документами владельца"""

    def __init__(self, session: AsyncSession, settings: Settings):
        self.session = session
        self.settings = settings
        self.document_repository = DocumentRepository(session)

    def build_file(self, file_name: str, content_type: str, content: bytes) -> StoredFile:
        """Проверка типа и размера файла и кодирование в base64"""
        if content_type not in ALLOWED_FILE_TYPES:
            logger.warning(f"File upload rejected: {file_name} - Invalid type: {content_type}")
            raise ValidationError("Invalid file type. Only PDF, JPG, PNG, and DOC files are allowed.")

        if len(content) > self.settings.max_upload_bytes:
            logger.warning(f"File size limit exceeded: {file_name} ({len(content)} bytes)")
            max_mb = self.settings.max_upload_bytes // (1024 * 1024)
            raise ValidationError(f"File size too large. Maximum size is {max_mb}MB.")

        if not content:
            raise ValidationError("Please upload a file")

        return StoredFile(
            name=file_name or "upload",
            content_type=content_type,
            size=len(content),
            data=base64.b64encode(content).decode("ascii")
        )

    async def upload_document(self, owner: User, document_data: DocumentCreate, file: StoredFile) -> Document:
        """Создание документа из загруженного файла"""
        document = Document.create_document(
            owner_id=owner.uuid,
            title=document_data.title,
            file=file,
            category=document_data.category,
            description=document_data.description
        )

        created = await self.document_repository.create(document)
        logger.info(f"Document uploaded by user {owner.email}: {created.title}")
        return created

    async def get_owned_document(self, document_uuid: uuid.UUID, user: User, action: str = "access") -> Document:
        """Документ, принадлежащий пользователю, иначе NotFound/Forbidden"""
        document = await self.document_repository.get_by_uuid(document_uuid)

        if not document:
            logger.warning(f"Document not found: {document_uuid}")
            raise NotFoundError("Document not found")

        if not document.is_owned_by(user.uuid):
            logger.warning(f"Unauthorized document {action} attempt by {user.email}")
            raise ForbiddenError(f"Not authorized to {action} this document")

        return document

    async def list_documents(
        self,
        owner: User,
        category: Optional[str] = None,
        search: Optional[str] = None
    ) -> List[Document]:
        """Документы пользователя; category и search объединяются через AND"""
        if category == "all":
            category = None
        search = search.strip() if search else None

        documents = await self.document_repository.list_by_owner(
            owner.uuid, category=category, search=search
        )
        logger.info(f"Documents retrieved for user {owner.email}: {len(documents)} documents")
        return documents

    async def update_document(
        self,
        document_uuid: uuid.UUID,
        user: User,
        update_data: DocumentUpdate,
        file: Optional[StoredFile] = None
    ) -> Document:
        """Обновление метаданных и, при наличии, файла документа"""
        document = await self.get_owned_document(document_uuid, user, action="update")

        document.update_metadata(
            title=update_data.title,
            category=update_data.category,
            description=update_data.description
        )
        if file is not None:
            document.replace_file(file)

        updated = await self.document_repository.update(document)
        logger.info(f"Document updated: {updated.title} by {user.email}")
        return updated

    async def delete_document(self, document_uuid: uuid.UUID, user: User) -> None:
        """Удаление документа вместе с его ссылкой общего доступа"""
        document = await self.get_owned_document(document_uuid, user, action="delete")
        await self.document_repository.delete(document.uuid)
        logger.info(f"Document deleted: {document.title} by {user.email}")
