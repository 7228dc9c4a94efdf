from pydantic import BaseModel, EmailStr, Field, field_validator, ConfigDict
from typing import Optional
from datetime import datetime
import uuid


class UserBase(BaseModel):
    """Базовая схема пользователя"""
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if len(v.strip()) < 2:
            raise ValueError('Name must be at least 2 characters long')
        return v.strip()


class UserCreate(UserBase):
    """Схема для регистрации пользователя"""
    password: str = Field(..., min_length=6, max_length=128)
    aadhaar_number: str = Field(..., pattern=r"^\d{12}$")
    phone: str = Field(..., pattern=r"^\d{10}$")


class UserLogin(BaseModel):
    """Схема для входа пользователя"""
    email: EmailStr
    password: str = Field(..., min_length=1)


class OTPVerify(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=1, max_length=16)


class OTPResend(BaseModel):
    email: EmailStr


class UserUpdate(BaseModel):
    """Схема для обновления профиля"""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = Field(None, pattern=r"^\d{10}$")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is not None and len(v.strip()) < 2:
            raise ValueError('Name must be at least 2 characters long')
        return v.strip() if v else v


class UserResponse(BaseModel):
    """Схема для ответа с данными пользователя"""
    id: uuid.UUID = Field(validation_alias="uuid")
    name: str
    email: str
    aadhaar_number: str
    phone: str
    is_verified: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class RegistrationResponse(BaseModel):
    user_id: uuid.UUID
    email: str
    test_otp: Optional[str] = None


class AuthResponse(BaseModel):
    """Токен доступа и профиль пользователя"""
    token: str
    token_type: str = "bearer"
    user: UserResponse


class OTPResendResponse(BaseModel):
    test_otp: Optional[str] = None
