from fastapi import APIRouter, Depends, status

from doclocker.core.auth import get_current_user, get_identity_service
from doclocker.core.schemas import ApiResponse
from doclocker.domains.identity.entities import User
from doclocker.domains.identity.schemas import (
    AuthResponse, OTPResend, OTPResendResponse, OTPVerify,
    RegistrationResponse, UserCreate, UserLogin, UserResponse
)
from doclocker.domains.identity.services import IdentityService

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/register",
    response_model=ApiResponse[RegistrationResponse],
    status_code=status.HTTP_201_CREATED
)
async def register(
    user_data: UserCreate,
    identity_service: IdentityService = Depends(get_identity_service)
):
    """Регистрация нового пользователя"""
    user, code = await identity_service.register_user(user_data)
    echo = identity_service.settings.otp_echo_in_response

    return ApiResponse(
        message="User registered successfully. Please verify OTP.",
        data=RegistrationResponse(
            user_id=user.uuid,
            email=user.email,
            test_otp=code if echo else None
        )
    )


@router.post("/verify-otp", response_model=ApiResponse[AuthResponse])
async def verify_otp(
    otp_data: OTPVerify,
    identity_service: IdentityService = Depends(get_identity_service)
):
    """Подтверждение аккаунта кодом OTP"""
    user, token = await identity_service.verify_otp(otp_data.email, otp_data.otp)

    return ApiResponse(
        message="Account verified successfully",
        data=AuthResponse(token=token, user=UserResponse.model_validate(user))
    )


@router.post("/resend-otp", response_model=ApiResponse[OTPResendResponse])
async def resend_otp(
    resend_data: OTPResend,
    identity_service: IdentityService = Depends(get_identity_service)
):
    """Повторная отправка кода"""
    code = await identity_service.resend_otp(resend_data.email)
    echo = identity_service.settings.otp_echo_in_response

    return ApiResponse(
        message="OTP resent successfully",
        data=OTPResendResponse(test_otp=code if echo else None)
    )


@router.post("/login", response_model=ApiResponse[AuthResponse])
async def login(
    login_data: UserLogin,
    identity_service: IdentityService = Depends(get_identity_service)
):
    """Вход пользователя"""
    user, token = await identity_service.login_user(login_data)

    return ApiResponse(
        message="Login successful",
        data=AuthResponse(token=token, user=UserResponse.model_validate(user))
    )


@router.get("/me", response_model=ApiResponse[UserResponse])
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Получение информации о текущем пользователе"""
    return ApiResponse(data=UserResponse.model_validate(current_user))
