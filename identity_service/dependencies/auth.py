# identity_service/dependencies/auth.py
"""
FastAPI dependencies that wire the authentication engine.

The hasher, token issuer and notification sender are built once from
settings; the stores are bound to the request's database session.

Usage in route:
    engine: AuthenticationEngine = Depends(get_auth_engine)
    current_user: UserOut = Depends(get_current_user)
"""

from functools import lru_cache

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from identity_service.auth.notifications import NotificationSender, build_notification_sender
from identity_service.auth.schemas.user_schemas import UserOut
from identity_service.auth.services.auth_services import AuthenticationEngine
from identity_service.auth.stores import SqlAlchemyCredentialStore, SqlAlchemyResetTokenStore
from identity_service.core.config import settings
from identity_service.core.security import PasswordHasher, TokenIssuer
from identity_service.dependencies.db import get_db

# Bearer scheme for Swagger UI compatibility
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_PREFIX}/auth/login")


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher.from_settings(settings)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    return TokenIssuer.from_settings(settings)


@lru_cache
def get_notification_sender() -> NotificationSender:
    return build_notification_sender(settings)


def get_auth_engine(db: Session = Depends(get_db)) -> AuthenticationEngine:
    return AuthenticationEngine(
        credential_store=SqlAlchemyCredentialStore(db),
        reset_token_store=SqlAlchemyResetTokenStore(db),
        password_hasher=get_password_hasher(),
        token_issuer=get_token_issuer(),
        notification_sender=get_notification_sender(),
        reset_link_base=settings.FRONTEND_URL,
    )


def get_current_user(
    token: str = Depends(oauth2_scheme),
    engine: AuthenticationEngine = Depends(get_auth_engine),
) -> UserOut:
    """Validate the Bearer access token and return the sanitized user."""
    return engine.validate_token(token)
