from doclocker.domains.documents.entities import (
    Document, DocumentCategory, ShareGrant, StoredFile, ALLOWED_FILE_TYPES
)
from doclocker.domains.documents.schemas import (
    DocumentBase, DocumentCreate, DocumentUpdate, DocumentSummary, DocumentResponse
)

__all__ = [
    "Document", "DocumentCategory", "ShareGrant", "StoredFile", "ALLOWED_FILE_TYPES",
    "DocumentBase", "DocumentCreate", "DocumentUpdate", "DocumentSummary", "DocumentResponse"
]
