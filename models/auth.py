from sqlmodel import SQLModel, Field
from datetime import datetime
from .helper import id_generator, utcnow


class User(SQLModel, table=True):
    """Person who owns boards and writes comments."""
    id: str = Field(default_factory=id_generator(), primary_key=True)
    name: str
    email: str = Field(unique=True, index=True)
    hashed_password: str
    created_at: datetime = Field(default_factory=utcnow)


class Token(SQLModel, table=True):
    """Bearer token issued to a user at login or registration."""
    id: str = Field(default_factory=id_generator(), primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    token_type: str = Field(default="bearer")
    access_token: str = Field(unique=True, index=True)
    expires_at: datetime
    created_at: datetime = Field(default_factory=utcnow)
    is_revoked: bool = Field(default=False)
