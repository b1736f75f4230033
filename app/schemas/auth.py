from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional

from app.models.enums import PermissionAction, UserRole
from app.schemas.user import ProfileRead


# -------------------------------------------------------------------
# LOGIN REQUEST (identifier is an email or an HR employee id)
# -------------------------------------------------------------------
class LoginRequest(BaseModel):
    identifier: str
    password: str


# -------------------------------------------------------------------
# REGISTER REQUEST
# -------------------------------------------------------------------
class RegisterRequest(BaseModel):
    display_name: str
    email: EmailStr
    password: str
    role: UserRole = UserRole.Student

    @field_validator("role")
    def self_service_role(cls, v):
        # Administrators are seeded from settings, never self-registered
        if v == UserRole.Admin:
            raise ValueError("The admin role cannot be self-registered")
        return v

    class Config:
        json_schema_extra = {
            "examples": [
                {
                    "display_name": "Student User",
                    "email": "student@example.com",
                    "password": "password123",
                    "role": "student"
                },
                {
                    "display_name": "Teacher User",
                    "email": "teacher@example.com",
                    "password": "password123",
                    "role": "teacher"
                }
            ]
        }


# -------------------------------------------------------------------
# TOKEN + PROFILE (login response)
# -------------------------------------------------------------------
class TokenWithUser(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user: ProfileRead
    permissions: list[PermissionAction] = []
