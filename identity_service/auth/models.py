"""
models.py
----------
SQLAlchemy ORM models for users, their contact identities and password
reset tokens.

• Portable column types (String ids, generic DateTime) so the same models run
  on PostgreSQL in production and SQLite in tests.
• Timestamps are timezone-aware UTC; SQLite drops the tzinfo on read, so the
  stores re-attach it when converting rows into records.

Tables are created with `Base.metadata.create_all` at startup. Manage schema
changes with Alembic or your chosen migration tool.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Index,
)
from sqlalchemy.orm import relationship

from identity_service.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class User(Base):
    """
    Core user record.
    - Email/phone are legacy single-value fields; contact-based accounts keep
      their full list in `contacts`.
    - password_hash is NULL for contact-only accounts.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(320), unique=True, nullable=True)
    phone = Column(String(24), nullable=True)
    password_hash = Column(Text, nullable=True)
    first_name = Column(String(128), nullable=True)
    last_name = Column(String(128), nullable=True)
    name = Column(String(255), nullable=True)
    source = Column(String(128), nullable=True)
    session_id = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    last_activity = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    contacts = relationship(
        "UserContact",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UserContact.position",
    )
    password_reset_tokens = relationship(
        "PasswordResetToken", back_populates="user", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_users_phone", "phone"),
    )


# ---------------------------------------------------------------------------
# Contact identities
# ---------------------------------------------------------------------------
class UserContact(Base):
    """
    One contact channel of a user.
    type: email | phone | other
    position keeps the submission order; lists only ever grow at the end.
    """
    __tablename__ = "user_contacts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    type = Column(String(32), nullable=False)
    value = Column(String(320), nullable=False)
    is_primary = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="contacts")

    __table_args__ = (
        Index("idx_user_contacts_type_value", "type", "value"),
        Index("idx_user_contacts_user_id", "user_id"),
    )


# ---------------------------------------------------------------------------
# Password Reset Tokens
# ---------------------------------------------------------------------------
class PasswordResetToken(Base):
    """
    Single-use password reset grants.
    Only the SHA-256 digest of the raw token is stored.
    """
    __tablename__ = "password_reset_tokens"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    token_hash = Column(String(64), unique=True, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="password_reset_tokens")
