from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from app.models.enums import PermissionAction, UserRole


# ---------------------------------------------------------
# BASE
# ---------------------------------------------------------
class ProfileBase(BaseModel):
    display_name: str
    email: str


# ---------------------------------------------------------
# READ PROFILE (response, never exposes the secret hash)
# ---------------------------------------------------------
class ProfileRead(ProfileBase):
    id: str
    role: UserRole
    approved: bool
    department_id: Optional[str] = None
    position: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    country: Optional[str] = None
    photo_url: Optional[str] = None
    date_of_birth: Optional[str] = None
    monthly_salary: Optional[float] = None
    employment_status: Optional[str] = None
    employment_start_date: Optional[str] = None
    employment_marital_status: Optional[str] = None
    employment_branch: Optional[str] = None
    employment_team: Optional[str] = None
    employment_salary_percentage: Optional[float] = None
    employment_active: Optional[bool] = None
    total_learning_hours: float = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ---------------------------------------------------------
# SELF-SERVICE UPDATE (missing or empty values never clear a field)
# ---------------------------------------------------------
class ProfileUpdate(BaseModel):
    display_name: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    country: Optional[str] = None
    photo_url: Optional[str] = None
    date_of_birth: Optional[str] = None


# ---------------------------------------------------------
# PERMISSIONS OF THE CURRENT PROFILE
# ---------------------------------------------------------
class PermissionsRead(BaseModel):
    role: UserRole
    is_department_manager: bool = False
    permissions: list[PermissionAction]
    # Ids of departments whose manager_id points at this profile
    managed_departments: list[str] = []
