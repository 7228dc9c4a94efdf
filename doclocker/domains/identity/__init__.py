from doclocker.domains.identity.entities import User
from doclocker.domains.identity.otp import (
    OTPProvider, FixedOTPProvider, RandomOTPProvider, build_otp_provider
)
from doclocker.domains.identity.schemas import (
    UserBase, UserCreate, UserLogin, UserUpdate, OTPVerify, OTPResend,
    UserResponse, RegistrationResponse, AuthResponse, OTPResendResponse
)

__all__ = [
    "User",
    "OTPProvider", "FixedOTPProvider", "RandomOTPProvider", "build_otp_provider",
    "UserBase", "UserCreate", "UserLogin", "UserUpdate", "OTPVerify", "OTPResend",
    "UserResponse", "RegistrationResponse", "AuthResponse", "OTPResendResponse"
]
