from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 30
    db_echo: bool = False

    frontend_url: str = "http://localhost:5173"
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])

    # Ссылки для общего доступа
    share_default_ttl_hours: float = 24
    share_max_ttl_hours: float = 720
    share_token_max_attempts: int = 3

    # Подтверждение регистрации
    otp_mode: Literal["fixed", "random"] = "fixed"
    otp_fixed_code: str = "123456"
    otp_ttl_minutes: int = 60 * 24 * 365
    otp_echo_in_response: bool = True

    max_upload_bytes: int = 5 * 1024 * 1024

    # Почта; без SMTP_HOST письма только пишутся в лог
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    email_from: str = "Digital Locker <no-reply@doclocker.local>"

    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"env_file": ".env", "extra": "ignore"}
