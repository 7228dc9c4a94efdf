import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from doclocker.core.config import Settings

# Контекст для хеширования паролей
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверка пароля"""
    # bcrypt имеет ограничение 72 байта
    return pwd_context.verify(plain_password[:72], hashed_password)


def get_password_hash(password: str) -> str:
    """Хеширование пароля"""
    return pwd_context.hash(password[:72])


class TokenIssuer:
    """Выпуск и проверка JWT токенов доступа"""

    def __init__(self, settings: Settings):
        self.secret = settings.jwt_secret
        self.algorithm = settings.jwt_algorithm
        self.expires_delta = timedelta(days=settings.access_token_expire_days)

    def create_access_token(self, user_id: uuid.UUID, expires_delta: Optional[timedelta] = None) -> str:
        """Создание JWT токена доступа; единственный claim - id пользователя"""
        expire = datetime.now(timezone.utc) + (expires_delta or self.expires_delta)
        to_encode = {"sub": str(user_id), "exp": expire}
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Optional[Dict[str, Any]]:
        """Проверка JWT токена и извлечение данных"""
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError:
            return None

    def get_user_id(self, token: str) -> Optional[uuid.UUID]:
        payload = self.verify_token(token)
        if not payload or not payload.get("sub"):
            return None
        try:
            return uuid.UUID(payload["sub"])
        except ValueError:
            return None
