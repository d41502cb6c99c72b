# identity_service/auth/stores.py
"""
Credential and reset-token stores.

The services depend only on the `CredentialStore` / `ResetTokenStore`
protocols. The SQLAlchemy implementations below commit every write
immediately and hand back immutable records.
"""

import hashlib
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Protocol

from sqlalchemy import case, exists, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from identity_service.auth.models import PasswordResetToken, User, UserContact
from identity_service.auth.records import (
    ContactEntry,
    ContactType,
    ResetTokenRecord,
    UserRecord,
)
from identity_service.core.exceptions import ConflictError


class CredentialStore(Protocol):
    def find_by_email(self, email: str) -> Optional[UserRecord]: ...

    def find_by_phone(self, phone: str) -> Optional[UserRecord]: ...

    def find_by_contact(self, contact_type: str, value: str) -> Optional[UserRecord]: ...

    def find_by_id(self, user_id: str) -> Optional[UserRecord]: ...

    def create(self, **fields: Any) -> UserRecord: ...

    def update(self, user_id: str, **fields: Any) -> Optional[UserRecord]: ...


class ResetTokenStore(Protocol):
    def create(
        self, user_id: str, token: str, expires_at: datetime, used: bool = False
    ) -> ResetTokenRecord: ...

    def find_unused_by_token(self, token: str) -> Optional[ResetTokenRecord]: ...

    def mark_used(self, token: str) -> bool: ...


# ---------------------------------------------------------------------------
# Row -> record conversion
# ---------------------------------------------------------------------------
def _aware(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite returns naive datetimes; everything we store is UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_user_record(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        email=user.email,
        phone=user.phone,
        password_hash=user.password_hash,
        first_name=user.first_name,
        last_name=user.last_name,
        name=user.name,
        contacts=tuple(
            ContactEntry(type=c.type, value=c.value, is_primary=c.is_primary)
            for c in user.contacts
        ),
        source=user.source,
        session_id=user.session_id,
        is_active=user.is_active,
        is_verified=user.is_verified,
        last_activity=_aware(user.last_activity),
        created_at=_aware(user.created_at),
        updated_at=_aware(user.updated_at),
    )


def _contact_rows(contacts: Iterable[ContactEntry]) -> List[UserContact]:
    return [
        UserContact(
            position=position,
            type=entry.type.value,
            value=entry.value,
            is_primary=entry.is_primary,
        )
        for position, entry in enumerate(contacts)
    ]


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


# ---------------------------------------------------------------------------
# SQLAlchemy credential store
# ---------------------------------------------------------------------------
_USER_FIELDS = {
    "email",
    "phone",
    "password_hash",
    "first_name",
    "last_name",
    "name",
    "source",
    "session_id",
    "is_active",
    "is_verified",
    "last_activity",
}


class SqlAlchemyCredentialStore:
    def __init__(self, db: Session):
        self.db = db

    def _first(self, query) -> Optional[UserRecord]:
        user = query.first()
        return _to_user_record(user) if user else None

    def _find_by_column_or_contact(self, column, contact_type: str, value: str) -> Optional[UserRecord]:
        """
        Match the legacy column or any contact entry of the same type.

        The legacy column only holds the primary contact, so non-primary
        entries are found through `user_contacts`. A legacy match is
        preferred, then the oldest account.
        """
        in_contacts = exists().where(
            UserContact.user_id == User.id,
            UserContact.type == contact_type,
            UserContact.value == value,
        )
        return self._first(
            self.db.query(User)
            .filter(or_(column == value, in_contacts))
            .order_by(case((column == value, 0), else_=1), User.created_at)
        )

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        return self._find_by_column_or_contact(User.email, ContactType.EMAIL.value, email)

    def find_by_phone(self, phone: str) -> Optional[UserRecord]:
        return self._find_by_column_or_contact(User.phone, ContactType.PHONE.value, phone)

    def find_by_contact(self, contact_type: str, value: str) -> Optional[UserRecord]:
        return self._first(
            self.db.query(User)
            .join(UserContact, UserContact.user_id == User.id)
            .filter(UserContact.type == contact_type, UserContact.value == value)
            .order_by(User.created_at)
        )

    def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        return self._first(self.db.query(User).filter(User.id == user_id))

    def create(self, **fields: Any) -> UserRecord:
        contacts = fields.pop("contacts", ())
        unknown = set(fields) - _USER_FIELDS
        if unknown:
            raise TypeError(f"Unknown user fields: {', '.join(sorted(unknown))}")

        user = User(**fields)
        user.contacts = _contact_rows(contacts)
        self.db.add(user)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            # Unique constraint violation on email
            raise ConflictError("User with this email already exists")

        self.db.refresh(user)
        return _to_user_record(user)

    def update(self, user_id: str, **fields: Any) -> Optional[UserRecord]:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            return None

        contacts = fields.pop("contacts", None)
        unknown = set(fields) - _USER_FIELDS
        if unknown:
            raise TypeError(f"Unknown user fields: {', '.join(sorted(unknown))}")

        for key, value in fields.items():
            setattr(user, key, value)
        if contacts is not None:
            user.contacts = _contact_rows(contacts)
            # Contact-only changes still count as an update
            user.updated_at = datetime.now(timezone.utc)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("User with this email already exists")

        self.db.refresh(user)
        return _to_user_record(user)


# ---------------------------------------------------------------------------
# SQLAlchemy reset token store
# ---------------------------------------------------------------------------
class SqlAlchemyResetTokenStore:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self, user_id: str, token: str, expires_at: datetime, used: bool = False
    ) -> ResetTokenRecord:
        row = PasswordResetToken(
            user_id=user_id,
            token_hash=hash_reset_token(token),
            expires_at=expires_at,
            used=used,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return ResetTokenRecord(
            token=token,
            user_id=row.user_id,
            expires_at=_aware(row.expires_at),
            used=row.used,
            created_at=_aware(row.created_at),
        )

    def find_unused_by_token(self, token: str) -> Optional[ResetTokenRecord]:
        row = (
            self.db.query(PasswordResetToken)
            .filter(
                PasswordResetToken.token_hash == hash_reset_token(token),
                PasswordResetToken.used.is_(False),
            )
            .first()
        )
        if not row:
            return None
        return ResetTokenRecord(
            token=token,
            user_id=row.user_id,
            expires_at=_aware(row.expires_at),
            used=row.used,
            created_at=_aware(row.created_at),
        )

    def mark_used(self, token: str) -> bool:
        """
        Consume the token. The update is conditional on `used = false`, so
        when two confirmations race only one of them gets True.
        """
        updated = (
            self.db.query(PasswordResetToken)
            .filter(
                PasswordResetToken.token_hash == hash_reset_token(token),
                PasswordResetToken.used.is_(False),
            )
            .update({"used": True}, synchronize_session=False)
        )
        self.db.commit()
        return updated == 1
