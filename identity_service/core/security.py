# identity_service/core/security.py
"""
Cryptographic primitives used by the authentication services.

Provides:
- PasswordHasher: Argon2id hashing with an optional server-side pepper
- TokenIssuer: signed, expiring access/refresh JWTs

Both are configured once from settings and hold no per-request state.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import uuid4

from jose import jwt, JWTError
from passlib.hash import argon2
from pydantic import BaseModel, ConfigDict

from identity_service.core.config import Settings


# ----------------------------------------------------------------------
# Password hashing
# ----------------------------------------------------------------------

class PasswordHasher:
    """
    Argon2id hashing with optional server-side pepper.
    Pepper is concatenated so it never travels with the DB dump.
    """

    def __init__(self, rounds: int = 3, memory_kib: int = 65536, pepper: str = ""):
        self._handler = argon2.using(rounds=rounds, memory_cost=memory_kib)
        self._pepper = pepper

    @classmethod
    def from_settings(cls, config: Settings) -> "PasswordHasher":
        return cls(
            rounds=config.PASSWORD_HASH_ROUNDS,
            memory_kib=config.PASSWORD_HASH_MEMORY_KIB,
            pepper=config.AUTH_PEPPER,
        )

    def hash(self, plain_password: str) -> str:
        """Hash password; Argon2 stores its own random salt in the digest."""
        return self._handler.hash(plain_password + self._pepper)

    def verify(self, plain_password: str, password_hash: str) -> bool:
        """
        Return False on mismatch.

        Raises:
            ValueError: If password_hash is not a valid Argon2 digest
        """
        return self._handler.verify(plain_password + self._pepper, password_hash)


# ----------------------------------------------------------------------
# Session tokens
# ----------------------------------------------------------------------

class InvalidTokenError(Exception):
    """Bad signature, malformed structure, missing subject or expired."""


class TokenClaims(BaseModel):
    model_config = ConfigDict(frozen=True)

    sub: str
    exp: datetime


class TokenIssuer:
    """
    Issues and verifies self-contained session credentials.

    Access and refresh tokens share the same claim layout and signing key;
    only their lifetimes differ.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(days=7),
        refresh_ttl: timedelta = timedelta(days=30),
    ):
        self._secret = secret
        self._algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, config: Settings) -> "TokenIssuer":
        return cls(
            secret=config.JWT_SECRET,
            algorithm=config.JWT_ALGORITHM,
            access_ttl=timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(minutes=config.REFRESH_TOKEN_EXPIRE_MINUTES),
        )

    def _issue(self, user_id: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": str(user_id),
            "exp": now + ttl,
            "iat": now,
            "jti": str(uuid4()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def issue_access(self, user_id: str) -> str:
        return self._issue(user_id, self.access_ttl)

    def issue_refresh(self, user_id: str) -> str:
        return self._issue(user_id, self.refresh_ttl)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and verify a token.

        Raises:
            InvalidTokenError: If the token cannot be trusted for any reason
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            raise InvalidTokenError(str(e)) from e

        sub = payload.get("sub")
        exp = payload.get("exp")
        if not sub or exp is None:
            raise InvalidTokenError("Token is missing required claims")

        return TokenClaims(sub=sub, exp=datetime.fromtimestamp(exp, tz=timezone.utc))
