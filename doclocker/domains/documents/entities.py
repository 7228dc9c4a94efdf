import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import FrozenSet, Optional


class DocumentCategory(str, enum.Enum):
    EDUCATION = "education"
    IDENTITY = "identity"
    HEALTH = "health"
    RAILWAY = "railway"
    OTHERS = "others"


ALLOWED_FILE_TYPES = frozenset({
    "application/pdf",
    "image/jpeg",
    "image/jpg",
    "image/png",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
})


@dataclass(frozen=True)
class ShareGrant:
    """Активная ссылка общего доступа к документу"""
    token: str
    expires_at: datetime
    issued_at: datetime
    notified_emails: FrozenSet[str] = field(default_factory=frozenset)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass
class StoredFile:
    """Файл документа, закодированный в base64"""
    name: str
    content_type: str
    size: int
    data: str


class Document:
    """Сущность документа домена Documents"""

    def __init__(
        self,
        uuid: uuid.UUID,
        owner_id: uuid.UUID,
        title: str,
        file: StoredFile,
        category: DocumentCategory = DocumentCategory.OTHERS,
        description: Optional[str] = None,
        share: Optional[ShareGrant] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.owner_id = owner_id
        self.title = title
        self.file = file
        self.category = DocumentCategory(category)
        self.description = description
        self.share = share
        self.created_at = created_at or datetime.now(timezone.utc)
        self.updated_at = updated_at or datetime.now(timezone.utc)

    @property
    def is_shared(self) -> bool:
        return self.share is not None

    def is_owned_by(self, user_id: uuid.UUID) -> bool:
        """Проверка является ли пользователь владельцем"""
        return self.owner_id == user_id

    def update_metadata(
        self,
        title: Optional[str] = None,
        category: Optional[DocumentCategory] = None,
        description: Optional[str] = None
    ) -> None:
        if title:
            self.title = title
        if category:
            self.category = DocumentCategory(category)
        if description is not None:
            self.description = description
        self.updated_at = datetime.now(timezone.utc)

    def replace_file(self, file: StoredFile) -> None:
        self.file = file
        self.updated_at = datetime.now(timezone.utc)

    def grant_share(
        self,
        token: str,
        expires_at: datetime,
        issued_at: datetime,
        recipient_email: Optional[str] = None
    ) -> ShareGrant:
        """Выдача новой ссылки; предыдущая перестает действовать"""
        recipients = frozenset({recipient_email.lower()}) if recipient_email else frozenset()
        self.share = ShareGrant(
            token=token,
            expires_at=expires_at,
            issued_at=issued_at,
            notified_emails=recipients
        )
        self.updated_at = issued_at
        return self.share

    def revoke_share(self) -> None:
        """Отзыв ссылки; для документа без ссылки ничего не меняет"""
        self.share = None
        self.updated_at = datetime.now(timezone.utc)

    @classmethod
    def create_document(
        cls,
        owner_id: uuid.UUID,
        title: str,
        file: StoredFile,
        category: DocumentCategory = DocumentCategory.OTHERS,
        description: Optional[str] = None
    ) -> "Document":
        """Создание нового документа"""
        return cls(
            uuid=uuid.uuid4(),
            owner_id=owner_id,
            title=title,
            file=file,
            category=category,
            description=description
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Document):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"Document(uuid={self.uuid}, title={self.title}, shared={self.is_shared})"
