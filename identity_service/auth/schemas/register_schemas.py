# identity_service/auth/schemas/register_schemas.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from identity_service.auth.schemas.user_schemas import UserOut


# ---------------------------
# Request Model
# ---------------------------
class RegisterRequest(BaseModel):
    """
    Incoming payload for POST /api/v1/auth/register

    Fields:
    - email:     required email address, unique per account
    - password:  required password string
    - firstName: optional first name
    - lastName:  optional last name
    - phone:     optional phone number
    """
    email: EmailStr
    password: str = Field(..., min_length=6)
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "email": "user@example.com",
                "password": "StrongPass123!",
                "firstName": "Alice",
                "lastName": "Smith",
                "phone": "+919876543210"
            }
        }


# ---------------------------
# Response Model
# ---------------------------
class AuthResponse(BaseModel):
    """
    Returned by register, login and refresh: the sanitized user plus a fresh
    access/refresh token pair.
    """
    user: UserOut
    accessToken: str
    refreshToken: str
