from pydantic import BaseModel, Field, field_validator
from typing import Optional
import uuid
from datetime import datetime, timezone

from doclocker.domains.documents.entities import Document, DocumentCategory


class DocumentBase(BaseModel):
    """Базовая схема метаданных документа"""
    title: str = Field(..., min_length=1, max_length=255)
    category: DocumentCategory = DocumentCategory.OTHERS
    description: Optional[str] = Field(None, max_length=2000)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Title cannot be empty')
        return v.strip()

    @field_validator('description')
    @classmethod
    def strip_description(cls, v):
        return v.strip() if v is not None else v


class DocumentCreate(DocumentBase):
    """Схема для загрузки документа"""
    pass


class DocumentUpdate(BaseModel):
    """Схема для обновления документа"""
    title: Optional[str] = Field(None, max_length=255)
    category: Optional[DocumentCategory] = None
    description: Optional[str] = Field(None, max_length=2000)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return v.strip() if v else None

    @field_validator('description')
    @classmethod
    def strip_description(cls, v):
        return v.strip() if v is not None else v


class DocumentSummary(BaseModel):
    """Документ без содержимого файла, для списков"""
    id: uuid.UUID
    title: str
    category: DocumentCategory
    description: Optional[str] = None
    file_name: str
    file_type: str
    file_size: int
    is_shared: bool
    is_expired: bool = False
    share_expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, document: Document, **extra) -> "DocumentSummary":
        return cls(
            id=document.uuid,
            title=document.title,
            category=document.category,
            description=document.description,
            file_name=document.file.name,
            file_type=document.file.content_type,
            file_size=document.file.size,
            is_shared=document.is_shared,
            is_expired=document.share.is_expired(datetime.now(timezone.utc)) if document.share else False,
            share_expires_at=document.share.expires_at if document.share else None,
            created_at=document.created_at,
            updated_at=document.updated_at,
            **extra
        )


class DocumentResponse(DocumentSummary):
    """Документ вместе с файлом в base64"""
    file_data: str

    @classmethod
    def from_entity(cls, document: Document, **extra) -> "DocumentResponse":
        return super().from_entity(document, file_data=document.file.data, **extra)
