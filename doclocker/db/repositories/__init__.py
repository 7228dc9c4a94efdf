from doclocker.db.repositories.user_repository import UserRepository
from doclocker.db.repositories.document_repository import DocumentRepository, ShareTokenConflict

__all__ = [
    "UserRepository",
    "DocumentRepository",
    "ShareTokenConflict"
]
