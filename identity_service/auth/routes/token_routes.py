# identity_service/auth/routes/token_routes.py
"""
Session credential endpoints:

POST /api/v1/auth/validate  - check an access token
POST /api/v1/auth/refresh   - trade a refresh token for a new pair
GET  /api/v1/auth/profile   - current user from the Bearer token
"""

from fastapi import APIRouter, Depends, status

from identity_service.auth.schemas.register_schemas import AuthResponse
from identity_service.auth.schemas.token_schemas import (
    ProfileResponse,
    RefreshTokenRequest,
    ValidateTokenRequest,
    ValidateTokenResponse,
)
from identity_service.auth.schemas.user_schemas import UserOut
from identity_service.auth.services.auth_services import AuthenticationEngine
from identity_service.core.config import settings
from identity_service.dependencies.auth import get_auth_engine, get_current_user

router = APIRouter(prefix=f"{settings.API_V1_PREFIX}/auth", tags=["auth"])


@router.post(
    "/validate",
    response_model=ValidateTokenResponse,
    status_code=status.HTTP_200_OK,
)
def validate_token_endpoint(
    payload: ValidateTokenRequest,
    engine: AuthenticationEngine = Depends(get_auth_engine),
):
    user = engine.validate_token(payload.token)
    return ValidateTokenResponse(valid=True, user=user)


@router.post(
    "/refresh",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
)
def refresh_token_endpoint(
    payload: RefreshTokenRequest,
    engine: AuthenticationEngine = Depends(get_auth_engine),
):
    return engine.refresh_token(payload.refreshToken)


@router.get(
    "/profile",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
)
def profile_endpoint(current_user: UserOut = Depends(get_current_user)):
    return ProfileResponse(user=current_user)
