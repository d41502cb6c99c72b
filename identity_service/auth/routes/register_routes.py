# identity_service/auth/routes/register_routes.py
from fastapi import APIRouter, Depends, status

from identity_service.auth.schemas.register_schemas import AuthResponse, RegisterRequest
from identity_service.auth.services.auth_services import AuthenticationEngine
from identity_service.core.config import settings
from identity_service.dependencies.auth import get_auth_engine

# Router with versioned prefix and tag
router = APIRouter(prefix=f"{settings.API_V1_PREFIX}/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new password account",
)
def register_endpoint(
    payload: RegisterRequest,
    engine: AuthenticationEngine = Depends(get_auth_engine),
):
    return engine.register(payload)
