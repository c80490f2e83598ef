from pydantic import BaseModel, Field
from datetime import datetime


class RegisterRequest(BaseModel):
    """Schema for creating an account."""
    name: str = Field(..., min_length=1, description="Display name")
    email: str = Field(..., min_length=3, description="Unique email address used to log in")
    password: str = Field(..., min_length=6, description="Plain text password")


class LoginRequest(BaseModel):
    """Schema for user login."""
    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Plain text password")


class UserResponse(BaseModel):
    """Schema for user responses (excludes the password digest)."""
    id: str = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    """Schema for login and registration responses."""
    access_token: str = Field(..., description="Bearer access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_at: datetime = Field(..., description="When the access token expires")
    user: UserResponse = Field(..., description="Authenticated user information")


class MessageResponse(BaseModel):
    """Schema for simple message responses."""
    message: str = Field(..., description="Response message")
