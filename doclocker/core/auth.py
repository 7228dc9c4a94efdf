from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from doclocker.core.config import Settings
from doclocker.core.db import get_db
from doclocker.core.exceptions import AuthenticationError
from doclocker.domains.identity.entities import User
from doclocker.domains.identity.services import IdentityService

security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_identity_service(request: Request, db: AsyncSession = Depends(get_db)) -> IdentityService:
    """Сервис идентификации с зависимостями из состояния приложения"""
    state = request.app.state
    return IdentityService(db, state.settings, state.token_issuer, state.otp_provider)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    identity_service: IdentityService = Depends(get_identity_service)
) -> User:
    """Зависимость для получения текущего пользователя"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    return await identity_service.get_current_user_from_token(credentials.credentials)
