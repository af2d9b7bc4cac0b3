"""
User document model
"""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from beanie import Document, Indexed
from pydantic import EmailStr, Field


class UserRole(str, Enum):
    """Platform role; admins may moderate any chat message."""
    USER = "user"
    ADMIN = "admin"


class User(Document):
    """User document model"""
    id: str = Field(default_factory=lambda: str(uuid4()), alias="_id")
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: Indexed(EmailStr, unique=True) = Field(..., description="Email address")
    role: UserRole = Field(default=UserRole.USER, description="Platform role")
    is_active: bool = Field(default=True, description="Whether user is active")
    created_at: datetime = Field(default_factory=datetime.utcnow, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=datetime.utcnow, description="Last update timestamp")

    class Settings:
        name = "users"
        indexes = [
            "role",
            "is_active",
        ]

    def __str__(self) -> str:
        return f"User(name={self.name}, email={self.email}, role={self.role.value})"
