from fastapi import APIRouter, Depends

from doclocker.core.auth import get_current_user, get_identity_service
from doclocker.core.schemas import ApiResponse
from doclocker.domains.identity.entities import User
from doclocker.domains.identity.schemas import UserResponse, UserUpdate
from doclocker.domains.identity.services import IdentityService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile", response_model=ApiResponse[UserResponse])
async def get_profile(current_user: User = Depends(get_current_user)):
    """Профиль текущего пользователя"""
    return ApiResponse(data=UserResponse.model_validate(current_user))


@router.put("/profile", response_model=ApiResponse[UserResponse])
async def update_profile(
    update_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    identity_service: IdentityService = Depends(get_identity_service)
):
    """Обновление имени и телефона"""
    user = await identity_service.update_user_profile(current_user, update_data)
    return ApiResponse(
        message="Profile updated successfully",
        data=UserResponse.model_validate(user)
    )
