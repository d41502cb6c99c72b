# identity_service/auth/records.py
"""
Immutable value records returned by the stores.

Services never mutate these; they compute new field values and write them
back through the store, which returns a fresh record.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ContactType(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    OTHER = "other"


class ContactEntry(BaseModel):
    """One `{type, value, isPrimary}` contact identity."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: ContactType
    value: str
    is_primary: bool = Field(False, alias="isPrimary")

    @property
    def key(self) -> Tuple[str, str]:
        return (self.type.value, self.value)


class UserRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    password_hash: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    name: Optional[str] = None
    contacts: Tuple[ContactEntry, ...] = ()
    source: Optional[str] = None
    session_id: Optional[str] = None
    is_active: bool = True
    is_verified: bool = False
    last_activity: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    def has_contact(self, contact_type: str, value: str) -> bool:
        return any(c.key == (contact_type, value) for c in self.contacts)


class ResetTokenRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str
    user_id: str
    expires_at: datetime
    used: bool = False
    created_at: datetime
