from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, and_
from sqlalchemy.exc import IntegrityError
import uuid

from doclocker.core.exceptions import ValidationError
from doclocker.db.base import as_utc
from doclocker.db.models.document import Document as DocumentModel
from doclocker.domains.documents.entities import Document, ShareGrant, StoredFile


class ShareTokenConflict(Exception):
    """Токен уже занят другим документом"""


class DocumentRepository:
    """Репозиторий для работы с документами"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, document: Document) -> Document:
        """Создание нового документа"""
        db_document = DocumentModel(
            uuid=document.uuid,
            owner_id=document.owner_id,
            title=document.title,
            category=document.category.value,
            description=document.description,
            file_name=document.file.name,
            file_type=document.file.content_type,
            file_size=document.file.size,
            file_data=document.file.data,
            **self._share_values(document)
        )

        self.session.add(db_document)
        try:
            await self.session.commit()
            await self.session.refresh(db_document)
            return self._to_domain(db_document)
        except IntegrityError:
            await self.session.rollback()
            raise ValidationError("Invalid owner_id")

    async def get_by_uuid(self, document_uuid: uuid.UUID) -> Optional[Document]:
        """Получение документа по UUID"""
        result = await self.session.execute(
            select(DocumentModel).where(DocumentModel.uuid == document_uuid)
        )
        db_document = result.scalar_one_or_none()
        return self._to_domain(db_document) if db_document else None

    async def get_by_share_token(self, token: str) -> Optional[Document]:
        """Получение документа по токену общего доступа"""
        result = await self.session.execute(
            select(DocumentModel).where(DocumentModel.share_token == token)
        )
        db_document = result.scalar_one_or_none()
        return self._to_domain(db_document) if db_document else None

    async def share_token_exists(self, token: str) -> bool:
        result = await self.session.execute(
            select(DocumentModel.uuid).where(DocumentModel.share_token == token)
        )
        return result.scalar_one_or_none() is not None

    async def list_by_owner(
        self,
        owner_id: uuid.UUID,
        category: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Document]:
        """Документы владельца с фильтром по категории и поиском по названию"""
        conditions = [DocumentModel.owner_id == owner_id]

        if category:
            conditions.append(DocumentModel.category == category)

        if search:
            conditions.append(func.lower(DocumentModel.title).contains(search.lower(), autoescape=True))

        result = await self.session.execute(
            select(DocumentModel)
            .where(and_(*conditions))
            .order_by(DocumentModel.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        db_documents = result.scalars().all()
        return [self._to_domain(doc) for doc in db_documents]

    async def update(self, document: Document) -> Document:
        """Обновление метаданных, файла и состояния общего доступа"""
        stmt = (
            update(DocumentModel)
            .where(DocumentModel.uuid == document.uuid)
            .values(
                title=document.title,
                category=document.category.value,
                description=document.description,
                file_name=document.file.name,
                file_type=document.file.content_type,
                file_size=document.file.size,
                file_data=document.file.data,
                updated_at=document.updated_at,
                **self._share_values(document)
            )
        )

        try:
            await self.session.execute(stmt)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            if document.share is not None:
                raise ShareTokenConflict(document.uuid)
            raise

        return await self.get_by_uuid(document.uuid)

    async def delete(self, document_uuid: uuid.UUID) -> bool:
        """Удаление документа"""
        stmt = delete(DocumentModel).where(DocumentModel.uuid == document_uuid)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    @staticmethod
    def _share_values(document: Document) -> dict:
        share = document.share
        if share is None:
            return {
                "share_token": None,
                "share_expires_at": None,
                "share_issued_at": None,
                "shared_with": [],
            }
        return {
            "share_token": share.token,
            "share_expires_at": share.expires_at,
            "share_issued_at": share.issued_at,
            "shared_with": sorted(share.notified_emails),
        }

    def _to_domain(self, db_document: DocumentModel) -> Document:
        """Преобразование модели БД в доменную сущность"""
        share = None
        if db_document.share_token:
            share = ShareGrant(
                token=db_document.share_token,
                expires_at=as_utc(db_document.share_expires_at),
                issued_at=as_utc(db_document.share_issued_at),
                notified_emails=frozenset(db_document.shared_with or [])
            )

        return Document(
            uuid=db_document.uuid,
            owner_id=db_document.owner_id,
            title=db_document.title,
            category=db_document.category,
            description=db_document.description,
            file=StoredFile(
                name=db_document.file_name,
                content_type=db_document.file_type,
                size=db_document.file_size,
                data=db_document.file_data
            ),
            share=share,
            created_at=as_utc(db_document.created_at),
            updated_at=as_utc(db_document.updated_at)
        )
