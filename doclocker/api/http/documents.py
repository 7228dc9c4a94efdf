from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from doclocker.core.auth import get_current_user
from doclocker.core.db import get_db
from doclocker.core.exceptions import ValidationError
from doclocker.core.schemas import ApiListResponse, ApiResponse
from doclocker.domains.documents.entities import StoredFile
from doclocker.domains.documents.schemas import (
    DocumentCreate, DocumentResponse, DocumentSummary, DocumentUpdate
)
from doclocker.domains.documents.services import DocumentService
from doclocker.domains.identity.entities import User
from doclocker.domains.sharing.schemas import (
    ShareGrantResponse, SharedDocumentResponse, ShareRequest, ShareStatusResponse
)
from doclocker.domains.sharing.services import ShareService

router = APIRouter(prefix="/documents", tags=["documents"])


def get_document_service(request: Request, db: AsyncSession = Depends(get_db)) -> DocumentService:
    return DocumentService(db, request.app.state.settings)


def get_share_service(request: Request, db: AsyncSession = Depends(get_db)) -> ShareService:
    state = request.app.state
    return ShareService(db, state.settings, state.dispatcher)


def _first_error(exc: SchemaValidationError) -> str:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ()))
    return f"{field}: {error['msg']}" if field else error["msg"]


async def _read_upload(document_service: DocumentService, upload: UploadFile) -> StoredFile:
    # Не больше лимита плюс один байт
    content = await upload.read(document_service.settings.max_upload_bytes + 1)
    return document_service.build_file(upload.filename, upload.content_type, content)


@router.post(
    "",
    response_model=ApiResponse[DocumentSummary],
    status_code=status.HTTP_201_CREATED
)
async def upload_document(
    file: Optional[UploadFile] = File(None),
    title: str = Form(""),
    category: str = Form("others"),
    description: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
    document_service: DocumentService = Depends(get_document_service)
):
    """Загрузка нового документа"""
    if file is None:
        raise ValidationError("Please upload a file")

    try:
        document_data = DocumentCreate(title=title, category=category, description=description)
    except SchemaValidationError as e:
        raise ValidationError(_first_error(e))

    stored_file = await _read_upload(document_service, file)
    document = await document_service.upload_document(current_user, document_data, stored_file)

    return ApiResponse(
        message="Document uploaded successfully",
        data=DocumentSummary.from_entity(document)
    )


@router.get("", response_model=ApiListResponse[List[DocumentSummary]])
async def get_documents(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    document_service: DocumentService = Depends(get_document_service)
):
    """Документы текущего пользователя без содержимого файлов"""
    documents = await document_service.list_documents(current_user, category=category, search=search)

    return ApiListResponse(
        count=len(documents),
        data=[DocumentSummary.from_entity(document) for document in documents]
    )


@router.get("/shared/{token}", response_model=ApiResponse[SharedDocumentResponse])
async def get_shared_document(
    token: str,
    share_service: ShareService = Depends(get_share_service)
):
    """Открытие документа по ссылке, без аутентификации"""
    shared = await share_service.resolve_grant(token)
    return ApiResponse(data=shared)


@router.get("/{document_id}", response_model=ApiResponse[DocumentResponse])
async def get_document(
    document_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    document_service: DocumentService = Depends(get_document_service)
):
    """Получение документа вместе с файлом"""
    document = await document_service.get_owned_document(document_id, current_user, action="access")
    return ApiResponse(data=DocumentResponse.from_entity(document))


@router.put("/{document_id}", response_model=ApiResponse[DocumentSummary])
async def update_document(
    document_id: uuid.UUID,
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
    document_service: DocumentService = Depends(get_document_service)
):
    """Обновление метаданных и, при необходимости, замена файла"""
    try:
        update_data = DocumentUpdate(title=title, category=category or None, description=description)
    except SchemaValidationError as e:
        raise ValidationError(_first_error(e))

    stored_file = await _read_upload(document_service, file) if file is not None else None
    document = await document_service.update_document(document_id, current_user, update_data, stored_file)

    return ApiResponse(
        message="Document updated successfully",
        data=DocumentSummary.from_entity(document)
    )


@router.delete("/{document_id}", response_model=ApiResponse[None])
async def delete_document(
    document_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    document_service: DocumentService = Depends(get_document_service)
):
    """Удаление документа"""
    await document_service.delete_document(document_id, current_user)
    return ApiResponse(message="Document deleted successfully")


@router.post("/{document_id}/share", response_model=ApiResponse[ShareGrantResponse])
async def share_document(
    document_id: uuid.UUID,
    share_data: Optional[ShareRequest] = None,
    current_user: User = Depends(get_current_user),
    share_service: ShareService = Depends(get_share_service)
):
    """Создание ссылки общего доступа; письмо получателю уходит в фоне"""
    share_data = share_data or ShareRequest()
    grant = await share_service.issue_grant(
        document_id,
        current_user,
        recipient_email=share_data.email,
        ttl_hours=share_data.ttl_hours
    )

    message = "Share link generated successfully"
    if share_data.email:
        message = f"Share link generated and sent to {share_data.email}"
    return ApiResponse(message=message, data=grant)


@router.get("/{document_id}/share", response_model=ApiResponse[ShareStatusResponse])
async def get_share_status(
    document_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    share_service: ShareService = Depends(get_share_service)
):
    """Текущее состояние ссылки"""
    share_status = await share_service.share_status(document_id, current_user)
    return ApiResponse(data=share_status)


@router.delete("/{document_id}/share", response_model=ApiResponse[None])
async def revoke_share(
    document_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    share_service: ShareService = Depends(get_share_service)
):
    """Отзыв ссылки общего доступа"""
    await share_service.revoke_grant(document_id, current_user)
    return ApiResponse(message="Share link revoked successfully")
