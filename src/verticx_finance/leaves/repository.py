from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveApplication


class LeaveRepository(Protocol):
    def create_leave(
        self,
        *,
        applicant_id: str,
        branch_id: str,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
        is_half_day: bool,
    ) -> str:
        raise NotImplementedError

    def get_leave(self, leave_id: str) -> Optional[LeaveApplication]:
        raise NotImplementedError

    def list_leaves(
        self,
        *,
        branch_id: Optional[str] = None,
        status: Optional[LeaveStatus] = None,
        applicant_id: Optional[str] = None,
        limit: int = 200,
    ) -> Sequence[LeaveApplication]:
        raise NotImplementedError

    def list_approved_overlapping(self, *, applicant_id: str, start: date, end: date) -> Sequence[LeaveApplication]:
        """Approved leaves whose [start_date, end_date] intersects [start, end]."""
        raise NotImplementedError

    def decide_leave(
        self,
        *,
        leave_id: str,
        status: LeaveStatus,
        decided_by: str,
        reviewer_note: Optional[str] = None,
    ) -> bool:
        """Flip a Pending application; False when it was already reviewed."""
        raise NotImplementedError
