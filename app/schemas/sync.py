from typing import Optional
from pydantic import BaseModel


class RosterSyncError(BaseModel):
    employee_id: Optional[str] = None
    email: Optional[str] = None
    error: str


class RosterSyncReport(BaseModel):
    total: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[RosterSyncError] = []

    @property
    def failed(self) -> int:
        return len(self.errors)
