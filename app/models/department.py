from sqlmodel import SQLModel, Field
from sqlalchemy import JSON, Column, String
from typing import Optional


class Department(SQLModel, table=True):
    __tablename__ = "departments"

    id: str = Field(sa_column=Column(String(128), primary_key=True))

    name: str = Field(
        sa_column=Column(String(128), nullable=False, unique=True)
    )

    description: Optional[str] = None

    # Single column, so a department has at most one manager
    manager_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), nullable=True, index=True)
    )

    # PermissionAction values granted to every member
    permissions: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False, default=list)
    )
