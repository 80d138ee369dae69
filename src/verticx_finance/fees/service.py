from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from ..academics.model import Student
from ..academics.repository import AcademicsRepository
from ..academics.session_calendar import AcademicCalendar, short_label
from ..auth.principal import FINANCE_ROLES, Principal
from ..common.datetime_utils import next_month_day, today_local
from ..common.money import ZERO, clamp_non_negative
from ..common.validators import require_non_empty, require_positive_amount
from ..core.constants import DEFAULT_SESSION_START_MONTH, FEE_DUE_DAY, MONTH_NAMES
from ..core.enums import FeeAdjustmentType, Role
from ..core.exceptions import AuthorizationError, ConfigurationMissing, NotFoundError, ValidationError
from .allocator import allocate
from .ledger import reduce_ledger
from .model import (
    FeeAdjustment,
    FeeHistoryItem,
    FeePayment,
    FeeTemplate,
    MonthlyFeeOverview,
    StudentFeeDetails,
)
from .repository import FeeRepository

logger = logging.getLogger(__name__)


class FeeService:
    def __init__(self, fees: FeeRepository, academics: AcademicsRepository, *, due_day: int = FEE_DUE_DAY):
        self._fees = fees
        self._academics = academics
        self._due_day = int(due_day)

    def _calendar(self, branch_id: str, today: date) -> AcademicCalendar:
        session = self._academics.get_session(branch_id)
        if session:
            return AcademicCalendar(session.start_date)
        return AcademicCalendar(date(today.year, DEFAULT_SESSION_START_MONTH, 1))

    def _student(self, student_id: str) -> Student:
        student = self._academics.get_student(student_id)
        if not student:
            raise NotFoundError("Student not found")
        return student

    def _template_for(self, student: Student) -> Optional[FeeTemplate]:
        if not student.class_id:
            return None
        s_class = self._academics.get_class(student.class_id)
        if not s_class or not s_class.fee_template_id:
            return None
        return self._fees.get_template(s_class.fee_template_id)

    @staticmethod
    def _check_student_access(principal: Principal, student: Student) -> None:
        principal.require_branch(student.branch_id)
        if principal.role == Role.STUDENT and principal.user_id != student.student_id:
            raise AuthorizationError("Students may only view their own fees")
        if principal.role == Role.PARENT and principal.user_id != student.parent_id:
            raise AuthorizationError("Parents may only view their own children's fees")
        if principal.role not in FINANCE_ROLES | {Role.STUDENT, Role.PARENT}:
            raise AuthorizationError(f"Role {principal.role.value} cannot access fee records")

    def get_student_fee_details(
        self,
        *,
        principal: Principal,
        student_id: str,
        today: Optional[date] = None,
    ) -> StudentFeeDetails:
        today = today or today_local()
        student = self._student(student_id)
        self._check_student_access(principal, student)

        record = self._fees.get_record(student_id)
        total_annual_fee = record.total_amount if record else ZERO
        total_paid = record.paid_amount if record else ZERO
        previous_dues = record.previous_session_dues if record else ZERO

        calendar = self._calendar(student.branch_id, today)
        try:
            dues = allocate(self._template_for(student), calendar.months)
        except ConfigurationMissing as e:
            logger.info("Fee details for %s use aggregate figures only: %s", student_id, e)
            previous_paid = min(max(total_paid, ZERO), max(previous_dues, ZERO))
            return StudentFeeDetails(
                student_id=student_id,
                total_annual_fee=total_annual_fee,
                total_paid=total_paid,
                total_outstanding=clamp_non_negative(total_annual_fee - total_paid),
                due_date=next_month_day(today, self._due_day),
                current_month_due=ZERO,
                previous_session_dues=previous_dues,
                previous_session_dues_paid=previous_paid,
            )

        allocation = reduce_ledger(
            paid_amount=total_paid,
            previous_session_dues=previous_dues,
            dues=dues,
            year_of=calendar.year_of,
        )
        current_label = short_label(MONTH_NAMES[today.month - 1])
        return StudentFeeDetails(
            student_id=student_id,
            total_annual_fee=total_annual_fee,
            total_paid=total_paid,
            total_outstanding=clamp_non_negative(total_annual_fee - total_paid),
            due_date=next_month_day(today, self._due_day),
            current_month_due=dues.get(current_label, ZERO),
            previous_session_dues=previous_dues,
            previous_session_dues_paid=allocation.previous_dues_paid,
            monthly_dues=allocation.months,
            has_monthly_breakdown=True,
        )

    def record_payment(
        self,
        *,
        principal: Principal,
        student_id: str,
        amount: object,
        transaction_id: str,
        details: str = "",
        paid_date: Optional[date] = None,
    ) -> FeePayment:
        student = self._student(student_id)
        self._check_student_access(principal, student)

        value = require_positive_amount(amount, "Amount")
        transaction_id = require_non_empty(transaction_id, "Transaction id")

        record = self._fees.get_record(student_id)
        if not record:
            raise NotFoundError("Fee record not found")
        if value > record.outstanding:
            raise ValidationError(f"Amount exceeds the outstanding balance of {record.outstanding}")

        payment = self._fees.record_payment(
            student_id=student_id,
            amount=value,
            paid_date=paid_date or today_local(),
            transaction_id=transaction_id,
            details=(details or "").strip() or None,
        )
        if payment is None:
            # Another payment landed between the check and the row lock.
            raise ValidationError("Payment could not be applied; the balance changed, please retry")

        logger.info("Recorded payment %s of %s for student %s", payment.payment_id, value, student_id)
        return payment

    def add_fee_adjustment(
        self,
        *,
        principal: Principal,
        student_id: str,
        adjustment_type: str,
        amount: object,
        reason: str,
        today: Optional[date] = None,
    ) -> FeeAdjustment:
        principal.require(Role.ADMIN, Role.PRINCIPAL)
        student = self._student(student_id)
        principal.require_branch(student.branch_id)

        try:
            kind = FeeAdjustmentType(str(adjustment_type).strip().lower())
        except ValueError:
            raise ValidationError("Adjustment type must be 'concession' or 'charge'")
        value = abs(require_positive_amount(amount, "Amount"))
        signed = -value if kind == FeeAdjustmentType.CONCESSION else value
        reason = require_non_empty(reason, "Reason")

        record = self._fees.get_record(student_id)
        if not record:
            raise NotFoundError("Fee record not found")
        if kind == FeeAdjustmentType.CONCESSION and value > record.outstanding:
            raise ValidationError(f"Concession exceeds the outstanding balance of {record.outstanding}")

        adjustment = self._fees.add_adjustment(
            student_id=student_id,
            amount=signed,
            adjustment_type=kind,
            reason=reason,
            adjusted_by=principal.user_id,
            adjusted_on=today or today_local(),
        )
        logger.info("Applied %s of %s to student %s", kind.value, signed, student_id)
        return adjustment

    def get_fee_history(self, *, principal: Principal, student_id: str) -> list[FeeHistoryItem]:
        student = self._student(student_id)
        self._check_student_access(principal, student)

        items: list[FeeHistoryItem] = [*self._fees.list_payments(student_id), *self._fees.list_adjustments(student_id)]
        items.sort(key=lambda item: item.entry_date)
        return items

    def get_branch_fee_overview(
        self,
        *,
        principal: Principal,
        branch_id: str,
        today: Optional[date] = None,
    ) -> list[MonthlyFeeOverview]:
        """Due vs. allocated paid per elapsed session month across a branch."""
        principal.require(*FINANCE_ROLES)
        principal.require_branch(branch_id)
        today = today or today_local()

        calendar = self._calendar(branch_id, today)
        labels = [short_label(m) for m in calendar.months_due_so_far(today)]
        totals = {label: {"due": ZERO, "paid": ZERO} for label in labels}

        students = list(self._academics.list_students(branch_id))
        records = self._fees.list_records([s.student_id for s in students])
        templates: dict[str, Optional[FeeTemplate]] = {}

        for student in students:
            if not student.class_id:
                continue
            s_class = self._academics.get_class(student.class_id)
            if not s_class or not s_class.fee_template_id:
                continue
            if s_class.fee_template_id not in templates:
                templates[s_class.fee_template_id] = self._fees.get_template(s_class.fee_template_id)
            try:
                dues = allocate(templates[s_class.fee_template_id], labels)
            except ConfigurationMissing:
                continue

            for label, due in dues.items():
                totals[label]["due"] += due

            record = records.get(student.student_id)
            if not record:
                continue
            allocation = reduce_ledger(
                paid_amount=record.paid_amount,
                previous_session_dues=record.previous_session_dues,
                dues=dues,
                year_of=calendar.year_of,
            )
            for month in allocation.months:
                totals[month.month]["paid"] += month.paid

        return [MonthlyFeeOverview(month=label, due=totals[label]["due"], paid=totals[label]["paid"]) for label in labels]
