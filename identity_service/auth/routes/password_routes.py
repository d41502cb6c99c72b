"""
Routes implementing password reset and password change:

POST /api/v1/auth/password-reset/request
POST /api/v1/auth/password-reset/confirm
POST /api/v1/auth/password/change
"""
from fastapi import APIRouter, Depends, status

from identity_service.auth.schemas.password_schemas import (
    MessageResponse,
    PasswordChangeRequest,
    PasswordResetConfirm,
    PasswordResetRequest,
)
from identity_service.auth.schemas.user_schemas import UserOut
from identity_service.auth.services.auth_services import AuthenticationEngine
from identity_service.core.config import settings
from identity_service.dependencies.auth import get_auth_engine, get_current_user

router = APIRouter(prefix=f"{settings.API_V1_PREFIX}/auth", tags=["auth"])


@router.post(
    "/password-reset/request",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
)
def request_password_reset(
    payload: PasswordResetRequest,
    engine: AuthenticationEngine = Depends(get_auth_engine),
):
    """
    Create a reset token if the account exists and send instructions.
    Always returns the same message.
    """
    return engine.request_password_reset(str(payload.email))


@router.post(
    "/password-reset/confirm",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
)
def confirm_password_reset(
    payload: PasswordResetConfirm,
    engine: AuthenticationEngine = Depends(get_auth_engine),
):
    """
    Verify the token and update the user's password.
    """
    return engine.confirm_password_reset(payload.token, payload.newPassword)


@router.post(
    "/password/change",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
)
def change_password(
    payload: PasswordChangeRequest,
    current_user: UserOut = Depends(get_current_user),
    engine: AuthenticationEngine = Depends(get_auth_engine),
):
    return engine.change_password(current_user.id, payload.currentPassword, payload.newPassword)
