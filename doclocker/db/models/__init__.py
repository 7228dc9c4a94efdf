from doclocker.db.models.user import User
from doclocker.db.models.document import Document

__all__ = [
    "User",
    "Document",
]
