# identity_service/auth/schemas/contact_schemas.py
"""
Schemas for contact-based registration and login.

Contact accounts have no password; the client names one or more contact
identities and receives an opaque session identifier, never a signed token.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from identity_service.auth.records import ContactEntry, ContactType
from identity_service.auth.schemas.user_schemas import UserOut

ResolutionResult = Literal["existing-user-updated", "new-user-created"]


class ContactRegisterRequest(BaseModel):
    name: Optional[str] = None
    contactInfo: List[ContactEntry] = Field(..., min_length=1)
    source: Optional[str] = None
    sessionId: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Alice",
                "contactInfo": [
                    {"type": "email", "value": "alice@example.com", "isPrimary": True},
                    {"type": "phone", "value": "+919876543210"}
                ],
                "source": "landing-page",
                "sessionId": "client-session-42"
            }
        }


class ContactLoginRequest(BaseModel):
    type: ContactType
    value: str


class ContactRegisterResponse(BaseModel):
    user: UserOut
    sessionId: str
    result: ResolutionResult


class ContactLoginResponse(BaseModel):
    user: UserOut
    sessionId: str
