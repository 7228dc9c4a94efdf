import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from doclocker.core.config import Settings
from doclocker.core.exceptions import (
    AuthenticationError, ForbiddenError, NotFoundError, ValidationError
)
from doclocker.core.security import TokenIssuer
from doclocker.db.repositories.user_repository import UserRepository
from doclocker.domains.identity.entities import User
from doclocker.domains.identity.otp import OTPProvider
from doclocker.domains.identity.schemas import UserCreate, UserLogin, UserUpdate

logger = logging.getLogger(__name__)


class IdentityService:
    """Сервис регистрации, подтверждения и аутентификации пользователей"""

    def __init__(
        self,
        session: AsyncSession,
        settings: Settings,
        token_issuer: TokenIssuer,
        otp_provider: OTPProvider
    ):
        self.session = session
        self.settings = settings
        self.token_issuer = token_issuer
        self.otp_provider = otp_provider
        self.user_repository = UserRepository(session)

    @property
    def otp_ttl(self) -> timedelta:
        return timedelta(minutes=self.settings.otp_ttl_minutes)

    async def register_user(self, user_data: UserCreate) -> Tuple[User, str]:
        """Регистрация нового пользователя; возвращает пользователя и выданный код"""
        existing = await self.user_repository.get_by_email_or_aadhaar(
            user_data.email, user_data.aadhaar_number
        )
        if existing:
            logger.warning(f"Registration attempt with existing email/aadhaar: {user_data.email}")
            raise ValidationError("User with this email or Aadhaar already exists")

        user = User.create_user(
            name=user_data.name,
            email=user_data.email,
            password=user_data.password,
            aadhaar_number=user_data.aadhaar_number,
            phone=user_data.phone
        )
        code = self.otp_provider.generate()
        user.set_otp(code, self.otp_ttl)

        created = await self.user_repository.create(user)
        logger.info(f"User registered: {created.email}")
        return created, code

    async def _get_unverified(self, email: str) -> User:
        user = await self.user_repository.get_by_email(email)
        if not user:
            logger.warning(f"OTP request for non-existent user: {email}")
            raise NotFoundError("User not found")
        if user.is_verified:
            raise ValidationError("User already verified")
        return user

    async def verify_otp(self, email: str, code: str) -> Tuple[User, str]:
        """Проверка кода подтверждения и выдача токена"""
        user = await self._get_unverified(email)

        now = datetime.now(timezone.utc)
        if not user.has_pending_otp(now) or not self.otp_provider.verify(code, user.otp_code):
            logger.warning(f"Invalid OTP attempt for user: {email}")
            raise ValidationError("Invalid or expired OTP")

        user.mark_verified()
        user = await self.user_repository.update(user)
        logger.info(f"User verified successfully: {user.email}")
        return user, self.token_issuer.create_access_token(user.uuid)

    async def resend_otp(self, email: str) -> str:
        """Повторная выдача кода подтверждения"""
        user = await self._get_unverified(email)
        code = self.otp_provider.generate()
        user.set_otp(code, self.otp_ttl)
        await self.user_repository.update(user)
        logger.info(f"OTP resent: {user.email}")
        return code

    async def authenticate_user(self, login_data: UserLogin) -> User:
        """Аутентификация пользователя"""
        user = await self.user_repository.get_by_email(login_data.email)

        if not user:
            logger.warning(f"Login attempt for non-existent user: {login_data.email}")
            raise AuthenticationError("Invalid credentials")

        if not user.is_verified:
            logger.warning(f"Login attempt for unverified user: {user.email}")
            raise ForbiddenError("Please verify your account first")

        if not user.authenticate(login_data.password):
            logger.warning(f"Failed login attempt for user: {user.email}")
            raise AuthenticationError("Invalid credentials")

        return user

    async def login_user(self, login_data: UserLogin) -> Tuple[User, str]:
        """Вход пользователя и создание JWT токена"""
        user = await self.authenticate_user(login_data)
        logger.info(f"User logged in successfully: {user.email}")
        return user, self.token_issuer.create_access_token(user.uuid)

    async def get_user_by_uuid(self, user_uuid) -> Optional[User]:
        return await self.user_repository.get_by_uuid(user_uuid)

    async def update_user_profile(self, user: User, update_data: UserUpdate) -> User:
        """Обновление профиля пользователя"""
        user.update_profile(name=update_data.name, phone=update_data.phone)
        updated = await self.user_repository.update(user)
        logger.info(f"Profile updated by: {updated.email}")
        return updated

    async def get_current_user_from_token(self, token: str) -> User:
        """Получение текущего пользователя из JWT токена"""
        user_uuid = self.token_issuer.get_user_id(token)
        if user_uuid is None:
            raise AuthenticationError()

        user = await self.user_repository.get_by_uuid(user_uuid)
        if user is None:
            logger.warning(f"User not found for token: {user_uuid}")
            raise AuthenticationError("User not found")

        if not user.is_verified:
            logger.warning(f"Unverified user attempted access: {user.email}")
            raise ForbiddenError("Please verify your account first")

        return user
