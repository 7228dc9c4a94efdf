from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, or_
from sqlalchemy.exc import IntegrityError
import uuid

from doclocker.core.exceptions import ValidationError
from doclocker.db.base import as_utc
from doclocker.db.models.user import User as UserModel
from doclocker.domains.identity.entities import User


class UserRepository:
    """Репозиторий для работы с пользователями"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: User) -> User:
        """Создание нового пользователя"""
        db_user = UserModel(
            uuid=user.uuid,
            name=user.name,
            email=user.email,
            aadhaar_number=user.aadhaar_number,
            phone=user.phone,
            password_hash=user.password_hash,
            is_verified=user.is_verified,
            otp_code=user.otp_code,
            otp_expires_at=user.otp_expires_at
        )

        self.session.add(db_user)
        try:
            await self.session.commit()
            await self.session.refresh(db_user)
            return self._to_domain(db_user)
        except IntegrityError:
            await self.session.rollback()
            raise ValidationError("User with this email or Aadhaar already exists")

    async def get_by_uuid(self, user_uuid: uuid.UUID) -> Optional[User]:
        """Получение пользователя по UUID"""
        result = await self.session.execute(
            select(UserModel).where(UserModel.uuid == user_uuid)
        )
        db_user = result.scalar_one_or_none()
        return self._to_domain(db_user) if db_user else None

    async def get_by_email(self, email: str) -> Optional[User]:
        """Получение пользователя по email"""
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email.lower())
        )
        db_user = result.scalar_one_or_none()
        return self._to_domain(db_user) if db_user else None

    async def get_by_email_or_aadhaar(self, email: str, aadhaar_number: str) -> Optional[User]:
        """Поиск пользователя по email или номеру Aadhaar"""
        result = await self.session.execute(
            select(UserModel)
            .where(or_(UserModel.email == email.lower(), UserModel.aadhaar_number == aadhaar_number))
            .limit(1)
        )
        db_user = result.scalar_one_or_none()
        return self._to_domain(db_user) if db_user else None

    async def update(self, user: User) -> User:
        """Обновление пользователя"""
        stmt = (
            update(UserModel)
            .where(UserModel.uuid == user.uuid)
            .values(
                name=user.name,
                phone=user.phone,
                is_verified=user.is_verified,
                otp_code=user.otp_code,
                otp_expires_at=user.otp_expires_at,
                updated_at=user.updated_at
            )
        )

        await self.session.execute(stmt)
        await self.session.commit()

        return await self.get_by_uuid(user.uuid)

    def _to_domain(self, db_user: UserModel) -> User:
        """Преобразование модели БД в доменную сущность"""
        return User(
            uuid=db_user.uuid,
            name=db_user.name,
            email=db_user.email,
            aadhaar_number=db_user.aadhaar_number,
            phone=db_user.phone,
            password_hash=db_user.password_hash,
            is_verified=db_user.is_verified,
            otp_code=db_user.otp_code,
            otp_expires_at=as_utc(db_user.otp_expires_at),
            created_at=as_utc(db_user.created_at),
            updated_at=as_utc(db_user.updated_at)
        )
