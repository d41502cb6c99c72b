"""
Pydantic schemas for password reset and password change.

POST /api/v1/auth/password-reset/request
    { "email": "string" }
POST /api/v1/auth/password-reset/confirm
    { "token": "string", "newPassword": "string" }
POST /api/v1/auth/password/change
    { "currentPassword": "string", "newPassword": "string" }
The reset request always returns the same message so that
attackers cannot discover whether an account exists.
"""
from pydantic import BaseModel, EmailStr, Field


class PasswordResetRequest(BaseModel):
    email: EmailStr = Field(..., description="Registered email address")


class PasswordResetConfirm(BaseModel):
    token: str = Field(..., description="Raw reset token sent to the user")
    newPassword: str = Field(..., min_length=6, description="New password for the account")


class PasswordChangeRequest(BaseModel):
    currentPassword: str = Field(..., description="Password currently set on the account")
    newPassword: str = Field(..., min_length=6, description="New password for the account")


class MessageResponse(BaseModel):
    message: str = Field(..., examples=["If the email exists, a password reset link has been sent"])
