# identity_service/auth/routes/contact_routes.py
from fastapi import APIRouter, Depends, status

from identity_service.auth.schemas.contact_schemas import (
    ContactLoginRequest,
    ContactLoginResponse,
    ContactRegisterRequest,
    ContactRegisterResponse,
)
from identity_service.auth.services.auth_services import AuthenticationEngine
from identity_service.core.config import settings
from identity_service.dependencies.auth import get_auth_engine

router = APIRouter(prefix=f"{settings.API_V1_PREFIX}/auth/contact", tags=["auth", "contact"])


@router.post(
    "/register",
    response_model=ContactRegisterResponse,
    status_code=status.HTTP_200_OK,
    summary="Register or merge a contact-based identity",
)
def contact_register_endpoint(
    payload: ContactRegisterRequest,
    engine: AuthenticationEngine = Depends(get_auth_engine),
):
    return engine.register_contact(payload)


@router.post(
    "/login",
    response_model=ContactLoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Log in with a single contact identity",
)
def contact_login_endpoint(
    payload: ContactLoginRequest,
    engine: AuthenticationEngine = Depends(get_auth_engine),
):
    return engine.login_contact(payload.type, payload.value)
