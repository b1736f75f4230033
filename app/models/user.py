# app/models/user.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, String
from sqlalchemy import Enum as SAEnum
from datetime import datetime, timezone
from typing import Any, Optional

from app.models.enums import UserRole


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(SQLModel, table=True):
    __tablename__ = "users"

    # Immutable once created ("staff_<hr id>", "user_<millis>", ...)
    id: str = Field(sa_column=Column(String(128), primary_key=True))

    email: str = Field(sa_column=Column(String(255), nullable=False, index=True, unique=True))
    # bcrypt hash; None means the profile cannot log in locally
    secret_hash: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))
    display_name: str = Field(nullable=False)

    role: UserRole = Field(
        sa_column=Column(SAEnum(UserRole, name="user_role"), nullable=False)
    )

    department_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), ForeignKey("departments.id"), nullable=True)
    )
    position: Optional[str] = None
    employment_department: Optional[str] = None

    approved: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))

    # --- Contact / employment attributes (kept in sync with HR) ---
    phone_number: Optional[str] = None
    address: Optional[str] = None
    country: Optional[str] = None
    photo_url: Optional[str] = None
    date_of_birth: Optional[str] = None
    monthly_salary: Optional[float] = Field(default=None, sa_column=Column(Float, nullable=True))
    employment_status: Optional[str] = None
    employment_start_date: Optional[str] = None
    employment_marital_status: Optional[str] = None
    employment_branch: Optional[str] = None
    employment_team: Optional[str] = None
    employment_salary_percentage: Optional[float] = Field(
        default=None, sa_column=Column(Float, nullable=True)
    )
    employment_active: Optional[bool] = Field(
        default=None, sa_column=Column(Boolean, nullable=True)
    )

    # Raw snapshot of the last HR record seen for this profile
    employment: Optional[dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))

    total_learning_hours: float = Field(default=0, sa_column=Column(Float, nullable=False, default=0))

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.Admin
