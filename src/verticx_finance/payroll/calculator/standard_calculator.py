from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ...common.datetime_utils import days_in_month, iter_days, month_bounds
from ...common.money import ZERO, round_currency
from ...core.constants import HALF_DAY_WEIGHT, SALARY_DIVISOR_DAYS
from ...core.enums import LeaveStatus, PayrollStatus
from ...leaves.model import LeaveApplication
from ..model import ManualSalaryAdjustment, PayrollFigures
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: base - leave days x (base / 30) + manual adjustments.

    The daily rate uses a flat 30-day divisor whatever the month length.
    """

    def __init__(self, *, divisor_days: int = SALARY_DIVISOR_DAYS):
        if int(divisor_days) <= 0:
            raise ValueError("divisor_days must be positive")
        self._divisor = Decimal(int(divisor_days))

    def unpaid_leave_days(self, leaves: Sequence[LeaveApplication], *, year: int, month: int) -> Decimal:
        month_start, month_end = month_bounds(year, month)
        total = ZERO
        for leave in leaves:
            if leave.status != LeaveStatus.APPROVED:
                continue
            if leave.end_date < month_start or leave.start_date > month_end:
                continue
            weight = Decimal(HALF_DAY_WEIGHT) if leave.is_half_day else Decimal(1)
            in_range = sum(1 for _ in iter_days(max(leave.start_date, month_start), min(leave.end_date, month_end)))
            total += weight * in_range
        # Overlapping applications can never cost more days than the month has.
        return min(total, Decimal(days_in_month(year, month)))

    def settle(
        self,
        *,
        base_salary: Optional[Decimal],
        year: int,
        month: int,
        leaves: Sequence[LeaveApplication],
        adjustments: Sequence[ManualSalaryAdjustment],
    ) -> PayrollFigures:
        if base_salary is None:
            return PayrollFigures(
                status=PayrollStatus.SALARY_NOT_SET,
                base_salary=None,
                unpaid_leave_days=ZERO,
                leave_deductions=None,
                manual_adjustments_total=ZERO,
                net_payable=None,
            )

        days = self.unpaid_leave_days(leaves, year=year, month=month)
        deductions = days * (base_salary / self._divisor)
        adjustments_total = sum((a.amount for a in adjustments), ZERO)
        net = base_salary - deductions + adjustments_total

        return PayrollFigures(
            status=PayrollStatus.PENDING,
            base_salary=base_salary,
            unpaid_leave_days=days,
            leave_deductions=round_currency(deductions),
            manual_adjustments_total=adjustments_total,
            net_payable=round_currency(net),
        )
