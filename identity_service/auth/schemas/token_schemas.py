# identity_service/auth/schemas/token_schemas.py
from pydantic import BaseModel, Field

from identity_service.auth.schemas.user_schemas import UserOut


class ValidateTokenRequest(BaseModel):
    token: str = Field(..., description="Access token to validate")


class ValidateTokenResponse(BaseModel):
    valid: bool = True
    user: UserOut


class RefreshTokenRequest(BaseModel):
    refreshToken: str = Field(..., description="Refresh token from a previous login")


class ProfileResponse(BaseModel):
    user: UserOut
