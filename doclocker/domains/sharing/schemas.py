from pydantic import BaseModel, EmailStr
from typing import List, Optional
from datetime import datetime

from doclocker.domains.documents.entities import DocumentCategory


class ShareRequest(BaseModel):
    """Схема запроса на создание ссылки"""
    email: Optional[EmailStr] = None
    ttl_hours: Optional[float] = None


class ShareGrantResponse(BaseModel):
    """Выданная ссылка общего доступа"""
    token: str
    expires_at: datetime
    share_link: str


class ShareStatusResponse(BaseModel):
    """Текущее состояние ссылки для владельца"""
    is_shared: bool
    expires_at: Optional[datetime] = None
    is_expired: bool = False
    share_link: Optional[str] = None
    shared_with: List[str] = []


class SharedDocumentResponse(BaseModel):
    """Документ, открытый по ссылке; без идентификатора владельца"""
    title: str
    category: DocumentCategory
    description: Optional[str] = None
    file_name: str
    file_type: str
    file_size: int
    file_data: str
    owner_name: str
    shared_at: datetime
