# app/schemas/employee.py

from typing import Any, Optional, Union
from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------
# EXTERNAL EMPLOYEE RECORD (HR system of record, read-only)
# ---------------------------------------------------------
class ExternalEmployeeRecord(BaseModel):
    id: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = Field(default=None, alias="fullName")
    phone: Optional[str] = None
    address: Optional[str] = None
    country: Optional[str] = None
    avatar_url: Optional[str] = Field(default=None, alias="avatarURL")
    birthday: Optional[str] = None
    base_salary: Optional[float] = Field(default=None, alias="baseSalary")
    employment_status: Optional[str] = Field(default=None, alias="employmentStatus")
    start_date: Optional[str] = Field(default=None, alias="startDate")
    marital_status: Optional[str] = Field(default=None, alias="maritalStatus")
    branch: Optional[str] = None
    team: Optional[str] = None
    salary_percentage: Optional[float] = Field(default=None, alias="salaryPercentage")
    active: Optional[bool] = None
    department: Optional[str] = None
    position: Optional[str] = None
    # HR may also issue the credential; never copied into the snapshot
    secret: Optional[str] = Field(default=None, alias="password")

    class Config:
        populate_by_name = True
        extra = "ignore"
        frozen = True

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Union[str, int, None]):
        if value is None:
            return None
        return str(value)

    def with_secret(self, secret: str) -> "ExternalEmployeeRecord":
        """Copy of this record carrying ``secret`` unless HR already supplied one."""
        if self.secret:
            return self
        return self.model_copy(update={"secret": secret})

    def snapshot(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"secret"})


# ---------------------------------------------------------
# HR LOGIN RESPONSE
# ---------------------------------------------------------
class HRLoginResponse(BaseModel):
    success: bool = False
    employee: Optional[ExternalEmployeeRecord] = None
    error: Optional[str] = None

    class Config:
        extra = "ignore"
