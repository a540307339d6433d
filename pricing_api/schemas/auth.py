"""
Pydantic schemas for authentication endpoints.

WHY: Schemas define request/response contracts, providing:
1. Automatic validation of request data
2. API documentation (OpenAPI/Swagger)
3. Clear separation between API and database models
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from pricing_api.models.user import UserRole


class LoginRequest(BaseModel):
    """
    Login request schema.

    WHY: Validates login credentials with email format checking
    and password length requirements.
    """

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(
        ...,
        min_length=8,
        max_length=100,
        description="User's password",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "vendedor@example.com.br",
                "password": "SenhaSegura123!",
            }
        }
    )


class FirstAdminRequest(BaseModel):
    """
    First administrator request schema.

    WHY: A fresh deployment has no users and therefore no one who can log
    in; this account is the only one created without a token.
    """

    email: EmailStr = Field(..., description="Administrator email address")
    password: str = Field(..., min_length=8, max_length=100, description="Password (min 8 characters)")
    name: str = Field(..., min_length=1, max_length=255, description="Administrator full name")


class UserCreateRequest(FirstAdminRequest):
    """User created by an administrator; sellers get the `user` role."""

    role: UserRole = Field(default=UserRole.USER, description="admin, director or user")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "diretor@example.com.br",
                "password": "SenhaSegura123!",
                "name": "Diretor Comercial",
                "role": "director",
            }
        }
    )


class UserResponse(BaseModel):
    """
    User response schema.

    WHY: Returns user data without sensitive information (no password hash).
    The role tells the frontend which price tables the user may edit.
    """

    id: int = Field(..., description="User ID")
    email: str = Field(..., description="User's email address")
    name: str = Field(..., description="User's full name")
    role: UserRole = Field(..., description="User role (admin, director or user)")
    is_active: bool = Field(..., description="Whether user account is active")
    created_at: datetime = Field(..., description="Account creation timestamp")

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """
    JWT token response schema.

    WHY: Returns access token with its lifetime so the client knows when
    to send the user back to login.
    """

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type (always 'bearer')")
    expires_in: int = Field(..., description="Token expiration time in seconds")
    user: UserResponse = Field(..., description="Authenticated user")


class LogoutResponse(BaseModel):
    """Logout response schema."""

    message: str = Field(
        default="Successfully logged out",
        description="Logout confirmation message",
    )
