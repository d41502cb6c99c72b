# identity_service/auth/services/auth_services.py
"""
Authentication flows.

AuthenticationEngine ties the stores, the password hasher, the token issuer
and the notification sender together. All collaborators are passed in at
construction; each public method is one short request/response transaction.

Flows:
- register / login: password accounts, returns a fresh token pair
- validate_token / refresh_token: stateless JWT checks plus an account lookup
- request_password_reset / confirm_password_reset: single-use 1 hour tokens
- change_password: authenticated password rotation
- register_contact / login_contact: password-less contact identities
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from identity_service.auth.notifications import Notification, NotificationSender
from identity_service.auth.records import ContactType, UserRecord
from identity_service.auth.schemas.contact_schemas import (
    ContactLoginResponse,
    ContactRegisterRequest,
    ContactRegisterResponse,
)
from identity_service.auth.schemas.login_schemas import LoginRequest
from identity_service.auth.schemas.password_schemas import MessageResponse
from identity_service.auth.schemas.register_schemas import AuthResponse, RegisterRequest
from identity_service.auth.schemas.user_schemas import UserOut, sanitize_user
from identity_service.auth.services.identity_services import (
    IdentityResolver,
    find_user_by_contact,
    generate_session_id,
)
from identity_service.auth.stores import CredentialStore, ResetTokenStore
from identity_service.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
)
from identity_service.core.logging import redact_email
from identity_service.core.security import (
    InvalidTokenError,
    PasswordHasher,
    TokenIssuer,
)

logger = logging.getLogger(__name__)

# Fixed lifetime, not configurable
RESET_TOKEN_TTL = timedelta(hours=1)

RESET_REQUESTED_MESSAGE = "If the email exists, a password reset link has been sent"
RESET_COMPLETED_MESSAGE = "Password has been reset successfully"
PASSWORD_CHANGED_MESSAGE = "Password changed successfully"

INVALID_CREDENTIALS = "Invalid credentials"
INACTIVE_ACCOUNT = "User account is inactive"
INVALID_RESET_TOKEN = "Invalid or expired reset token"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthenticationEngine:
    def __init__(
        self,
        credential_store: CredentialStore,
        reset_token_store: ResetTokenStore,
        password_hasher: PasswordHasher,
        token_issuer: TokenIssuer,
        notification_sender: NotificationSender,
        identity_resolver: Optional[IdentityResolver] = None,
        clock: Optional[Callable[[], datetime]] = None,
        reset_link_base: str = "http://localhost:3000",
    ):
        self.credential_store = credential_store
        self.reset_token_store = reset_token_store
        self.password_hasher = password_hasher
        self.token_issuer = token_issuer
        self.notification_sender = notification_sender
        self.clock = clock or _utcnow
        self.identity_resolver = identity_resolver or IdentityResolver(
            credential_store, clock=self.clock
        )
        self.reset_link_base = reset_link_base.rstrip("/")

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------
    def _auth_response(self, user: UserRecord) -> AuthResponse:
        return AuthResponse(
            user=sanitize_user(user),
            accessToken=self.token_issuer.issue_access(user.id),
            refreshToken=self.token_issuer.issue_refresh(user.id),
        )

    def _active_user_from_token(self, token: str, failure_message: str) -> UserRecord:
        """Every verification failure collapses into the same Unauthorized."""
        try:
            claims = self.token_issuer.verify(token)
        except InvalidTokenError as e:
            logger.warning(f"Token rejected: {e}")
            raise UnauthorizedError(failure_message)

        user = self.credential_store.find_by_id(claims.sub)
        if not user or not user.is_active:
            logger.warning(f"Token subject {claims.sub} is missing or inactive")
            raise UnauthorizedError(failure_message)
        return user

    # -----------------------------------------------------------------------
    # Password accounts
    # -----------------------------------------------------------------------
    def register(self, payload: RegisterRequest) -> AuthResponse:
        email = str(payload.email)
        if self.credential_store.find_by_email(email):
            logger.warning(f"Registration conflict for {redact_email(email)}")
            raise ConflictError("User with this email already exists")

        password_hash = self.password_hasher.hash(payload.password)
        user = self.credential_store.create(
            email=email,
            password_hash=password_hash,
            first_name=payload.firstName,
            last_name=payload.lastName,
            phone=payload.phone,
            is_active=True,
            is_verified=False,
        )

        logger.info(f"Registered user {user.id}")
        return self._auth_response(user)

    def login(self, payload: LoginRequest) -> AuthResponse:
        email = str(payload.email)
        user = self.credential_store.find_by_email(email)
        if not user:
            logger.warning(f"Login attempt with unknown email {redact_email(email)}")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        # Contact-only accounts have no password to check
        if not user.password_hash or not self.password_hasher.verify(
            payload.password, user.password_hash
        ):
            logger.warning(f"Login failed for user {user.id}: bad password")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not user.is_active:
            logger.warning(f"Login failed for user {user.id}: account inactive")
            raise UnauthorizedError(INACTIVE_ACCOUNT)

        logger.info(f"User {user.id} logged in")
        return self._auth_response(user)

    # -----------------------------------------------------------------------
    # Session credentials
    # -----------------------------------------------------------------------
    def validate_token(self, token: str) -> UserOut:
        user = self._active_user_from_token(token, "Invalid token")
        return sanitize_user(user)

    def refresh_token(self, refresh_token: str) -> AuthResponse:
        """
        Issue a new pair. The presented refresh token is not revoked and stays
        valid until its own expiry.
        """
        user = self._active_user_from_token(refresh_token, "Invalid refresh token")
        logger.info(f"Refreshed tokens for user {user.id}")
        return self._auth_response(user)

    # -----------------------------------------------------------------------
    # Password reset
    # -----------------------------------------------------------------------
    def request_password_reset(self, email: str) -> MessageResponse:
        """
        Create a reset token and send it. Unknown emails get the same answer
        as known ones, and delivery problems never reach the caller.
        """
        generic_response = MessageResponse(message=RESET_REQUESTED_MESSAGE)

        user = self.credential_store.find_by_email(email)
        if not user:
            logger.info(f"Password reset requested for unknown email {redact_email(email)}")
            return generic_response

        raw_token = secrets.token_urlsafe(32)
        expires_at = self.clock() + RESET_TOKEN_TTL
        self.reset_token_store.create(user.id, raw_token, expires_at, used=False)
        logger.info(f"Password reset token created for user {user.id}")

        notification = Notification(
            channel="email",
            recipient=email,
            subject="Password reset",
            message=(
                "Use the link below to reset your password. It expires in 1 hour.\n"
                f"{self.reset_link_base}/reset-password?token={raw_token}"
            ),
        )
        try:
            self.notification_sender.send(notification)
        except Exception:
            # Sender failures never reach the caller; the token stays valid
            logger.exception(f"Password reset notification failed for user {user.id}")

        return generic_response

    def confirm_password_reset(self, token: str, new_password: str) -> MessageResponse:
        """
        Update the password, then consume the token.

        The two writes are not in one transaction. The credential goes first
        so a failure in between leaves the token usable again instead of
        consuming it without changing the password.
        """
        reset = self.reset_token_store.find_unused_by_token(token)
        if not reset:
            logger.warning("Password reset rejected: unknown or used token")
            raise BadRequestError(INVALID_RESET_TOKEN)

        if self.clock() > reset.expires_at:
            logger.warning(f"Password reset rejected for user {reset.user_id}: token expired")
            raise BadRequestError(INVALID_RESET_TOKEN)

        password_hash = self.password_hasher.hash(new_password)

        user = self.credential_store.update(reset.user_id, password_hash=password_hash)
        if not user:
            logger.warning(f"Password reset rejected: user {reset.user_id} no longer exists")
            raise BadRequestError(INVALID_RESET_TOKEN)

        if not self.reset_token_store.mark_used(token):
            # A concurrent confirmation consumed it first
            logger.warning(f"Password reset rejected for user {reset.user_id}: token already consumed")
            raise BadRequestError(INVALID_RESET_TOKEN)

        logger.info(f"Password reset completed for user {user.id}")
        return MessageResponse(message=RESET_COMPLETED_MESSAGE)

    # -----------------------------------------------------------------------
    # Password change
    # -----------------------------------------------------------------------
    def change_password(
        self, user_id: str, current_password: str, new_password: str
    ) -> MessageResponse:
        user = self.credential_store.find_by_id(user_id)
        if not user or not user.password_hash:
            raise NotFoundError("User not found")

        if not self.password_hasher.verify(current_password, user.password_hash):
            logger.warning(f"Password change rejected for user {user.id}: wrong current password")
            raise UnauthorizedError("Current password is incorrect")

        self.credential_store.update(
            user.id, password_hash=self.password_hasher.hash(new_password)
        )
        logger.info(f"Password changed for user {user.id}")
        return MessageResponse(message=PASSWORD_CHANGED_MESSAGE)

    # -----------------------------------------------------------------------
    # Contact identities
    # -----------------------------------------------------------------------
    def register_contact(self, payload: ContactRegisterRequest) -> ContactRegisterResponse:
        resolved = self.identity_resolver.resolve(
            payload.contactInfo,
            name=payload.name,
            source=payload.source,
            session_id=payload.sessionId,
        )
        return resolved.to_response()

    def login_contact(self, contact_type: ContactType, value: str) -> ContactLoginResponse:
        user = find_user_by_contact(self.credential_store, contact_type, value)
        if not user:
            logger.warning(f"Contact login with unknown {contact_type.value}")
            raise UnauthorizedError("Invalid contact credentials")
        if not user.is_active:
            logger.warning(f"Contact login failed for user {user.id}: account inactive")
            raise UnauthorizedError(INACTIVE_ACCOUNT)

        user = self.credential_store.update(user.id, last_activity=self.clock())
        logger.info(f"User {user.id} logged in by contact")
        return ContactLoginResponse(user=sanitize_user(user), sessionId=generate_session_id())
