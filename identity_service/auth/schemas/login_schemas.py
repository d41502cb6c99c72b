# identity_service/auth/schemas/login_schemas.py
from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """
    Login request.

    email: Address the account was registered with
    password: Plain text password from client
    """
    email: EmailStr = Field(..., description="Registered email address")
    password: str = Field(..., description="User password")

    class Config:
        json_schema_extra = {
            "example": {
                "email": "user@example.com",
                "password": "StrongPass123!"
            }
        }
