from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PayrollStatus, Role


@dataclass(frozen=True)
class ManualSalaryAdjustment:
    adjustment_id: str
    branch_id: str
    staff_id: str
    month: str
    amount: Decimal
    reason: str
    adjusted_by: str
    adjusted_at: datetime


@dataclass(frozen=True)
class PayrollFigures:
    """Calculator output for one staff member and month."""

    status: PayrollStatus
    base_salary: Optional[Decimal]
    unpaid_leave_days: Decimal
    leave_deductions: Optional[Decimal]
    manual_adjustments_total: Decimal
    net_payable: Optional[Decimal]


@dataclass(frozen=True)
class PayrollRecord:
    record_id: str
    branch_id: str
    staff_id: str
    staff_name: str
    staff_role: Role
    month: str
    base_salary: Optional[Decimal]
    unpaid_leave_days: Decimal
    leave_deductions: Optional[Decimal]
    manual_adjustments_total: Decimal
    net_payable: Optional[Decimal]
    status: PayrollStatus
    paid_at: Optional[datetime] = None
    paid_by: Optional[str] = None

    @property
    def is_frozen(self) -> bool:
        return self.status == PayrollStatus.PAID

    def with_figures(self, figures: PayrollFigures) -> "PayrollRecord":
        return replace(
            self,
            base_salary=figures.base_salary,
            unpaid_leave_days=figures.unpaid_leave_days,
            leave_deductions=figures.leave_deductions,
            manual_adjustments_total=figures.manual_adjustments_total,
            net_payable=figures.net_payable,
            status=figures.status,
        )


@dataclass(frozen=True)
class PayrollProcessResult:
    paid: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
