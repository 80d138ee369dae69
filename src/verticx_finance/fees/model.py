from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from ..common.money import clamp_non_negative
from ..core.enums import FeeAdjustmentType, MonthlyDueStatus


@dataclass(frozen=True)
class FeeComponent:
    component: str
    amount: Decimal


@dataclass(frozen=True)
class MonthlyFee:
    month: str
    total: Decimal
    breakdown: tuple[FeeComponent, ...] = ()


@dataclass(frozen=True)
class FeeTemplate:
    template_id: str
    branch_id: str
    name: str
    grade_level: int
    amount: Decimal
    monthly_breakdown: Optional[tuple[MonthlyFee, ...]] = None


@dataclass(frozen=True)
class FeeRecord:
    student_id: str
    total_amount: Decimal
    paid_amount: Decimal
    due_date: date
    previous_session_dues: Decimal = Decimal("0")

    @property
    def outstanding(self) -> Decimal:
        return clamp_non_negative(self.total_amount - self.paid_amount)


@dataclass(frozen=True)
class FeePayment:
    payment_id: str
    student_id: str
    amount: Decimal
    paid_date: date
    transaction_id: str
    details: Optional[str] = None

    @property
    def entry_date(self) -> date:
        return self.paid_date


@dataclass(frozen=True)
class FeeAdjustment:
    adjustment_id: str
    student_id: str
    amount: Decimal
    adjustment_type: FeeAdjustmentType
    reason: str
    adjusted_by: str
    adjusted_on: date

    @property
    def entry_date(self) -> date:
        return self.adjusted_on


FeeHistoryItem = Union[FeePayment, FeeAdjustment]


@dataclass(frozen=True)
class MonthlyDue:
    month: str
    year: int
    total: Decimal
    paid: Decimal
    balance: Decimal
    status: MonthlyDueStatus


@dataclass(frozen=True)
class LedgerAllocation:
    previous_dues_paid: Decimal
    months: tuple[MonthlyDue, ...]
    unallocated: Decimal

    @property
    def allocated(self) -> Decimal:
        return self.previous_dues_paid + sum((m.paid for m in self.months), Decimal("0"))


@dataclass(frozen=True)
class StudentFeeDetails:
    student_id: str
    total_annual_fee: Decimal
    total_paid: Decimal
    total_outstanding: Decimal
    due_date: date
    current_month_due: Decimal
    previous_session_dues: Decimal
    previous_session_dues_paid: Decimal
    monthly_dues: tuple[MonthlyDue, ...] = field(default_factory=tuple)
    has_monthly_breakdown: bool = False


@dataclass(frozen=True)
class MonthlyFeeOverview:
    month: str
    due: Decimal
    paid: Decimal

    @property
    def pending(self) -> Decimal:
        return max(Decimal("0"), self.due - self.paid)
