# identity_service/auth/schemas/user_schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from identity_service.auth.records import ContactEntry, UserRecord


class UserOut(BaseModel):
    """
    Sanitized user representation returned by every endpoint.
    Never carries the password hash.
    """
    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    name: Optional[str] = None
    contactInfo: List[ContactEntry] = Field(default_factory=list)
    source: Optional[str] = None
    sessionId: Optional[str] = None
    isActive: bool
    isVerified: bool
    lastActivity: Optional[datetime] = None
    createdAt: datetime
    updatedAt: datetime


def sanitize_user(user: UserRecord) -> UserOut:
    """Drop the password hash and map the record onto the public shape."""
    return UserOut(
        id=user.id,
        email=user.email,
        phone=user.phone,
        firstName=user.first_name,
        lastName=user.last_name,
        name=user.name,
        contactInfo=list(user.contacts),
        source=user.source,
        sessionId=user.session_id,
        isActive=user.is_active,
        isVerified=user.is_verified,
        lastActivity=user.last_activity,
        createdAt=user.created_at,
        updatedAt=user.updated_at,
    )
