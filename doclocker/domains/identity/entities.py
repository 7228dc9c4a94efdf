import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from doclocker.core.security import get_password_hash, verify_password


class User:
    """Сущность пользователя домена Identity"""

    def __init__(
        self,
        uuid: uuid.UUID,
        name: str,
        email: str,
        aadhaar_number: str,
        phone: str,
        password_hash: str,
        is_verified: bool = False,
        otp_code: Optional[str] = None,
        otp_expires_at: Optional[datetime] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.name = name
        self.email = email
        self.aadhaar_number = aadhaar_number
        self.phone = phone
        self.password_hash = password_hash
        self.is_verified = is_verified
        self.otp_code = otp_code
        self.otp_expires_at = otp_expires_at
        self.created_at = created_at or datetime.now(timezone.utc)
        self.updated_at = updated_at or datetime.now(timezone.utc)

    def authenticate(self, password: str) -> bool:
        """Проверка пароля пользователя"""
        return verify_password(password, self.password_hash)

    def set_otp(self, code: str, ttl: timedelta) -> None:
        """Сохранение выданного кода подтверждения"""
        self.otp_code = code
        self.otp_expires_at = datetime.now(timezone.utc) + ttl
        self.updated_at = datetime.now(timezone.utc)

    def has_pending_otp(self, now: datetime) -> bool:
        if not self.otp_code or not self.otp_expires_at:
            return False
        return now <= self.otp_expires_at

    def mark_verified(self) -> None:
        """Подтверждение аккаунта"""
        self.is_verified = True
        self.otp_code = None
        self.otp_expires_at = None
        self.updated_at = datetime.now(timezone.utc)

    def update_profile(self, name: Optional[str] = None, phone: Optional[str] = None) -> None:
        """Обновление профиля пользователя"""
        if name:
            self.name = name
        if phone:
            self.phone = phone
        self.updated_at = datetime.now(timezone.utc)

    @classmethod
    def create_user(
        cls,
        name: str,
        email: str,
        password: str,
        aadhaar_number: str,
        phone: str
    ) -> "User":
        """Создание нового пользователя с хешированием пароля"""
        return cls(
            uuid=uuid.uuid4(),
            name=name,
            email=email.lower(),
            aadhaar_number=aadhaar_number,
            phone=phone,
            password_hash=get_password_hash(password)
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, User):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"User(uuid={self.uuid}, email={self.email}, verified={self.is_verified})"
