"""Провайдеры одноразовых кодов подтверждения"""
import hmac
import secrets
from abc import ABC, abstractmethod

from doclocker.core.config import Settings


class OTPProvider(ABC):
    """Выдача и проверка кода подтверждения регистрации"""

    @abstractmethod
    def generate(self) -> str:
        ...

    def verify(self, candidate: str, issued: str) -> bool:
        if not candidate or not issued:
            return False
        return hmac.compare_digest(candidate.encode(), issued.encode())


class FixedOTPProvider(OTPProvider):
    """Всегда выдает один и тот же код (режим тестирования)"""

    def __init__(self, code: str = "123456"):
        self.code = code

    def generate(self) -> str:
        return self.code


class RandomOTPProvider(OTPProvider):
    def __init__(self, length: int = 6):
        self.length = length

    def generate(self) -> str:
        return "".join(secrets.choice("0123456789") for _ in range(self.length))


def build_otp_provider(settings: Settings) -> OTPProvider:
    if settings.otp_mode == "random":
        return RandomOTPProvider()
    return FixedOTPProvider(settings.otp_fixed_code)
