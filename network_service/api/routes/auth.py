"""
Authentication routes
"""
from fastapi import APIRouter, Depends, status

from ...domain.models import User
from ...schemas import (
    UserRegister, UserLogin, UpdateProfile, ChangePassword, ForgotPassword,
    ResetPassword, AuthResponse, ForgotPasswordResponse, MessageResponse,
    DataResponse, UserProfile
)
from ...application.services import AuthService, UserService
from ..dependencies import get_auth_service, get_user_service, get_current_user


router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    auth_service: AuthService = Depends(get_auth_service),
    user_service: UserService = Depends(get_user_service)
):
    """
    Register a new user

    - **firstName**, **lastName**: 2-50 characters
    - **email**: Valid, unused email address
    - **password**: At least 6 characters
    """
    token, user = await auth_service.register(
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        email=user_data.email,
        password=user_data.password
    )
    return AuthResponse(token=token, user=await user_service.build_profile(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    auth_service: AuthService = Depends(get_auth_service),
    user_service: UserService = Depends(get_user_service)
):
    """Login with email and password"""
    token, user = await auth_service.login(credentials.email, credentials.password)
    return AuthResponse(token=token, user=await user_service.build_profile(user))


@router.get("/me", response_model=DataResponse[UserProfile])
async def get_me(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """Get current user's profile"""
    return DataResponse[UserProfile](data=await user_service.build_profile(current_user))


@router.put("/profile", response_model=DataResponse[UserProfile])
async def update_profile(
    profile_data: UpdateProfile,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """Update current user's profile"""
    profile = await user_service.update_profile(
        current_user, profile_data.model_dump(exclude_unset=True)
    )
    return DataResponse[UserProfile](data=profile)


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    password_data: ChangePassword,
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Change password"""
    await auth_service.change_password(
        current_user, password_data.current_password, password_data.new_password
    )
    return MessageResponse(message="Password updated successfully")


@router.post("/forgot-password", response_model=ForgotPasswordResponse, response_model_exclude_none=True)
async def forgot_password(
    request: ForgotPassword,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Request a password reset token"""
    token = await auth_service.forgot_password(request.email)
    return ForgotPasswordResponse(message="Password reset email sent", reset_token=token)


@router.put("/reset-password/{token}", response_model=MessageResponse)
async def reset_password(
    token: str,
    request: ResetPassword,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Reset password with a token"""
    await auth_service.reset_password(token, request.password)
    return MessageResponse(message="Password reset successful")


@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: User = Depends(get_current_user)):
    """
    Logout

    Tokens are stateless; the client discards its token.
    """
    return MessageResponse(message="Logged out successfully")
