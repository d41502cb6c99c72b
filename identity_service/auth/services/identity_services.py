# identity_service/auth/services/identity_services.py
"""
Identity resolution for contact-based registration.

A submission names one or more contact identities. The first one that
belongs to an existing account decides which account it is; its contact list
grows with whatever the submission adds. Otherwise a new password-less
account is created.
"""

import logging
import secrets
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel

from identity_service.auth.records import ContactEntry, ContactType, UserRecord
from identity_service.auth.schemas.contact_schemas import (
    ContactRegisterResponse,
    ResolutionResult,
)
from identity_service.auth.schemas.user_schemas import sanitize_user
from identity_service.auth.stores import CredentialStore
from identity_service.core.exceptions import BadRequestError, ConflictError

logger = logging.getLogger(__name__)

EXISTING_USER_UPDATED: ResolutionResult = "existing-user-updated"
NEW_USER_CREATED: ResolutionResult = "new-user-created"


def generate_session_id() -> str:
    """Opaque random session identifier. Not a signed token."""
    return secrets.token_urlsafe(32)


def find_user_by_contact(
    store: CredentialStore, contact_type: ContactType, value: str
) -> Optional[UserRecord]:
    """Email and phone use their own lookups; anything else is matched in the contact list."""
    if contact_type == ContactType.EMAIL:
        return store.find_by_email(value)
    if contact_type == ContactType.PHONE:
        return store.find_by_phone(value)
    return store.find_by_contact(contact_type.value, value)


def merge_contacts(
    existing: Sequence[ContactEntry], submitted: Sequence[ContactEntry]
) -> List[ContactEntry]:
    """Append submitted entries whose (type, value) is not present yet."""
    merged = list(existing)
    seen = {entry.key for entry in merged}
    for entry in submitted:
        if entry.key not in seen:
            merged.append(entry)
            seen.add(entry.key)
    return merged


def select_primary(contacts: Sequence[ContactEntry]) -> ContactEntry:
    for entry in contacts:
        if entry.is_primary:
            return entry
    return contacts[0]


class ResolvedIdentity(BaseModel):
    user: UserRecord
    result: ResolutionResult
    session_id: str

    def to_response(self) -> ContactRegisterResponse:
        return ContactRegisterResponse(
            user=sanitize_user(self.user),
            sessionId=self.session_id,
            result=self.result,
        )


class IdentityResolver:
    def __init__(
        self,
        credential_store: CredentialStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.credential_store = credential_store
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _find_match(self, contacts: Sequence[ContactEntry]) -> Optional[UserRecord]:
        """Sequential scan; the first entry that belongs to an account wins."""
        for entry in contacts:
            found = find_user_by_contact(self.credential_store, entry.type, entry.value)
            if found is not None:
                return found
        return None

    def _merge(
        self,
        existing: UserRecord,
        contacts: Sequence[ContactEntry],
        now: datetime,
        name: Optional[str],
        source: Optional[str],
        session_id: Optional[str],
    ) -> ResolvedIdentity:
        """Append new contacts; blank metadata never overwrites stored values."""
        changes = {
            "contacts": merge_contacts(existing.contacts, contacts),
            "last_activity": now,
        }
        if name:
            changes["name"] = name
        if source:
            changes["source"] = source
        if session_id:
            changes["session_id"] = session_id

        user = self.credential_store.update(existing.id, **changes)
        added = len(changes["contacts"]) - len(existing.contacts)
        logger.info(f"Merged contact submission into user {existing.id} ({added} new contacts)")
        return ResolvedIdentity(
            user=user,
            result=EXISTING_USER_UPDATED,
            session_id=generate_session_id(),
        )

    def resolve(
        self,
        contacts: Sequence[ContactEntry],
        name: Optional[str] = None,
        source: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> ResolvedIdentity:
        if not contacts:
            raise BadRequestError("At least one contact entry is required")

        now = self.clock()
        existing = self._find_match(contacts)
        if existing:
            return self._merge(existing, contacts, now, name, source, session_id)

        # Legacy email/phone columns come from the primary contact
        primary = select_primary(contacts)
        try:
            user = self.credential_store.create(
                email=primary.value if primary.type == ContactType.EMAIL else None,
                phone=primary.value if primary.type == ContactType.PHONE else None,
                password_hash=None,
                name=name or None,
                source=source or None,
                session_id=session_id or None,
                is_active=True,
                is_verified=False,
                last_activity=now,
                contacts=list(contacts),
            )
        except ConflictError:
            # A concurrent submission claimed the primary contact first
            existing = self._find_match(contacts)
            if existing is None:
                raise
            logger.info(f"Lost create race for primary contact, merging into user {existing.id}")
            return self._merge(existing, contacts, now, name, source, session_id)

        logger.info(f"Created contact-only user {user.id} with {len(contacts)} contacts")
        return ResolvedIdentity(
            user=user,
            result=NEW_USER_CREATED,
            session_id=generate_session_id(),
        )
