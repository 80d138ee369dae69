from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class LeaveApplication:
    leave_id: str
    applicant_id: str
    branch_id: str
    leave_type: str
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    is_half_day: bool = False
    created_at: Optional[datetime] = None
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
    reviewer_note: Optional[str] = None
