from doclocker.domains.sharing.schemas import (
    ShareRequest, ShareGrantResponse, ShareStatusResponse, SharedDocumentResponse
)

__all__ = [
    "ShareRequest", "ShareGrantResponse", "ShareStatusResponse", "SharedDocumentResponse"
]
