from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..auth.principal import STAFF_ROLES, Principal
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import LeaveStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import LeaveApplication
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    def __init__(self, leaves: LeaveRepository):
        self._leaves = leaves

    def apply_leave(
        self,
        *,
        principal: Principal,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
        is_half_day: bool = False,
    ) -> str:
        if principal.role not in STAFF_ROLES:
            raise AuthorizationError("Only staff members can apply for leave")
        if not principal.branch_id:
            raise ValidationError("Staff member is not assigned to a branch")

        if end_date < start_date:
            raise ValidationError("End date must be on or after the start date")
        if is_half_day and end_date != start_date:
            raise ValidationError("A half-day leave must start and end on the same day")

        leave_type = require_non_empty(leave_type, "Leave type")
        reason = require_non_empty(reason, "Reason")
        return self._leaves.create_leave(
            applicant_id=principal.user_id,
            branch_id=principal.branch_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            is_half_day=bool(is_half_day),
        )

    def _decide(self, *, principal: Principal, leave_id: str, status: LeaveStatus, note: str) -> None:
        principal.require(Role.ADMIN, Role.PRINCIPAL)

        leave = self._leaves.get_leave(leave_id)
        if not leave:
            raise NotFoundError("Leave application not found")
        principal.require_branch(leave.branch_id)
        if leave.applicant_id == principal.user_id:
            raise AuthorizationError("Reviewers cannot decide their own leave")
        if leave.status != LeaveStatus.PENDING:
            raise ValidationError("Leave application has already been reviewed")

        ok = self._leaves.decide_leave(
            leave_id=leave_id,
            status=status,
            decided_by=principal.user_id,
            reviewer_note=(note or "").strip() or None,
        )
        if not ok:
            raise ValidationError("Leave application has already been reviewed")
        logger.info("Leave %s marked %s by %s", leave_id, status.value, principal.user_id)

    def approve_leave(self, *, principal: Principal, leave_id: str, note: str = "") -> None:
        self._decide(principal=principal, leave_id=leave_id, status=LeaveStatus.APPROVED, note=note)

    def reject_leave(self, *, principal: Principal, leave_id: str, note: str = "") -> None:
        self._decide(principal=principal, leave_id=leave_id, status=LeaveStatus.REJECTED, note=note)

    def list_my_leaves(self, *, principal: Principal) -> Sequence[LeaveApplication]:
        return self._leaves.list_leaves(applicant_id=principal.user_id, limit=DEFAULT_LIST_LIMIT)

    def list_pending(self, *, principal: Principal, branch_id: Optional[str] = None) -> Sequence[LeaveApplication]:
        principal.require(Role.ADMIN, Role.PRINCIPAL)
        branch_id = branch_id or principal.branch_id
        principal.require_branch(branch_id)
        return self._leaves.list_leaves(branch_id=branch_id, status=LeaveStatus.PENDING, limit=500)
