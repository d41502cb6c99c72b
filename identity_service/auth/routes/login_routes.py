# identity_service/auth/routes/login_routes.py
"""
POST /api/v1/auth/login - email + password, returns a fresh token pair.

Unknown email, wrong password and password-less accounts all answer
"Invalid credentials"; only an inactive account is reported separately.
"""

from fastapi import APIRouter, Depends, status

from identity_service.auth.schemas.login_schemas import LoginRequest
from identity_service.auth.schemas.register_schemas import AuthResponse
from identity_service.auth.services.auth_services import AuthenticationEngine
from identity_service.core.config import settings
from identity_service.dependencies.auth import get_auth_engine

router = APIRouter(prefix=f"{settings.API_V1_PREFIX}/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Authenticate with email and password",
)
def login_endpoint(
    payload: LoginRequest,
    engine: AuthenticationEngine = Depends(get_auth_engine),
):
    return engine.login(payload)
