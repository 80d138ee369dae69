from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..auth.principal import PAYROLL_ROLES, Principal
from ..common.datetime_utils import month_bounds, month_key, now_local, parse_month_key
from ..common.ids import new_id
from ..common.validators import require_amount, require_non_empty
from ..core.enums import PayrollStatus, Role
from ..core.exceptions import FrozenRecordConflict, NotFoundError, ValidationError
from ..leaves.repository import LeaveRepository
from ..staff.model import StaffMember
from ..staff.repository import StaffRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import ManualSalaryAdjustment, PayrollProcessResult, PayrollRecord
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


class PayrollService:
    def __init__(
        self,
        payroll: PayrollRepository,
        staff: StaffRepository,
        leaves: LeaveRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._payroll = payroll
        self._staff = staff
        self._leaves = leaves
        self._calculator = calculator or StandardPayrollCalculator()

    @staticmethod
    def _normalize_month(month: str) -> tuple[str, int, int]:
        year, mon = parse_month_key(month)
        return month_key(year, mon), year, mon

    def _staff_member(self, principal: Principal, staff_id: str) -> StaffMember:
        member = self._staff.get_by_id(staff_id)
        if not member:
            raise NotFoundError("Staff member not found")
        principal.require_branch(member.branch_id)
        return member

    def _settle(self, member: StaffMember, month: str, year: int, mon: int) -> PayrollRecord:
        existing = self._payroll.get_record(staff_id=member.staff_id, month=month)
        if existing and existing.is_frozen:
            return existing

        month_start, month_end = month_bounds(year, mon)
        figures = self._calculator.settle(
            base_salary=member.salary,
            year=year,
            month=mon,
            leaves=self._leaves.list_approved_overlapping(
                applicant_id=member.staff_id, start=month_start, end=month_end
            ),
            adjustments=self._payroll.list_manual_adjustments(staff_id=member.staff_id, month=month),
        )

        if existing:
            record = existing.with_figures(figures)
        else:
            record = PayrollRecord(
                record_id=new_id("pay-rec"),
                branch_id=member.branch_id,
                staff_id=member.staff_id,
                staff_name=member.name,
                staff_role=member.role,
                month=month,
                base_salary=figures.base_salary,
                unpaid_leave_days=figures.unpaid_leave_days,
                leave_deductions=figures.leave_deductions,
                manual_adjustments_total=figures.manual_adjustments_total,
                net_payable=figures.net_payable,
                status=figures.status,
            )
        # The repository re-checks the Paid state under a row lock.
        return self._payroll.save_unless_paid(record)

    def build_monthly_payroll(self, *, principal: Principal, branch_id: str, month: str) -> list[PayrollRecord]:
        """Compute (or return frozen) payroll rows for every staff member of a branch."""
        principal.require(*PAYROLL_ROLES)
        principal.require_branch(branch_id)
        month, year, mon = self._normalize_month(month)

        exclude = principal.user_id if principal.role == Role.PRINCIPAL else None
        records = [
            self._settle(member, month, year, mon)
            for member in self._staff.list_payroll_staff(branch_id, exclude_staff_id=exclude)
        ]
        frozen = sum(1 for r in records if r.is_frozen)
        logger.info("Built payroll for branch %s %s: %d rows (%d already paid)", branch_id, month, len(records), frozen)
        return records

    def recalculate_staff(self, *, principal: Principal, staff_id: str, month: str) -> PayrollRecord:
        principal.require(*PAYROLL_ROLES)
        member = self._staff_member(principal, staff_id)
        month, year, mon = self._normalize_month(month)

        existing = self._payroll.get_record(staff_id=staff_id, month=month)
        if existing and existing.is_frozen:
            raise FrozenRecordConflict(f"Payroll for {member.name} ({month}) is already paid")
        return self._settle(member, month, year, mon)

    def process_payroll(
        self,
        *,
        principal: Principal,
        record_ids: Sequence[str],
        now: Optional[datetime] = None,
    ) -> PayrollProcessResult:
        """Pay every Pending record in the batch; anything else is skipped.

        Re-running the batch is a no-op for records already paid.
        """
        principal.require(*PAYROLL_ROLES)
        now = now or now_local()
        result = PayrollProcessResult()

        for record_id in dict.fromkeys(record_ids):
            record = self._payroll.get_by_id(record_id)
            if not record:
                result.skipped.append(record_id)
                continue
            principal.require_branch(record.branch_id)
            if record.status != PayrollStatus.PENDING:
                logger.info("Skipping payroll record %s with status %s", record_id, record.status.value)
                result.skipped.append(record_id)
                continue
            if self._payroll.mark_paid(record_id=record_id, paid_by=principal.user_id, paid_at=now):
                result.paid.append(record_id)
            else:
                result.skipped.append(record_id)

        logger.info("Processed payroll: %d paid, %d skipped", len(result.paid), len(result.skipped))
        return result

    def pay_record(self, *, principal: Principal, record_id: str, now: Optional[datetime] = None) -> PayrollRecord:
        principal.require(*PAYROLL_ROLES)
        record = self._payroll.get_by_id(record_id)
        if not record:
            raise NotFoundError("Payroll record not found")
        principal.require_branch(record.branch_id)
        if record.is_frozen:
            raise FrozenRecordConflict("Payroll record is already paid")
        if record.status == PayrollStatus.SALARY_NOT_SET:
            raise ValidationError("Salary is not set for this staff member")

        if not self._payroll.mark_paid(record_id=record_id, paid_by=principal.user_id, paid_at=now or now_local()):
            raise FrozenRecordConflict("Payroll record is already paid")
        logger.info("Paid payroll record %s", record_id)
        return self._payroll.get_by_id(record_id)

    def add_manual_adjustment(
        self,
        *,
        principal: Principal,
        staff_id: str,
        month: str,
        amount: object,
        reason: str,
        now: Optional[datetime] = None,
    ) -> ManualSalaryAdjustment:
        principal.require(*PAYROLL_ROLES)
        member = self._staff_member(principal, staff_id)
        month, _, _ = self._normalize_month(month)

        value = require_amount(amount, "Amount")
        if value == 0:
            raise ValidationError("Amount must not be 0")
        reason = require_non_empty(reason, "Reason")

        existing = self._payroll.get_record(staff_id=staff_id, month=month)
        if existing and existing.is_frozen:
            raise FrozenRecordConflict(f"Payroll for {member.name} ({month}) is already paid")

        adjustment = self._payroll.add_manual_adjustment(
            branch_id=member.branch_id,
            staff_id=staff_id,
            month=month,
            amount=value,
            reason=reason,
            adjusted_by=principal.user_id,
            adjusted_at=now or now_local(),
        )
        logger.info("Manual salary adjustment %s for %s in %s", value, staff_id, month)
        return adjustment

    def list_manual_adjustments(self, *, principal: Principal, staff_id: str, month: str) -> Sequence[ManualSalaryAdjustment]:
        principal.require(*PAYROLL_ROLES)
        self._staff_member(principal, staff_id)
        month, _, _ = self._normalize_month(month)
        return self._payroll.list_manual_adjustments(staff_id=staff_id, month=month)

    def list_month(self, *, principal: Principal, branch_id: str, month: str) -> Sequence[PayrollRecord]:
        principal.require(*PAYROLL_ROLES)
        principal.require_branch(branch_id)
        month, _, _ = self._normalize_month(month)
        return self._payroll.list_for_month(branch_id=branch_id, month=month)
