from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional, Sequence

from ...leaves.model import LeaveApplication
from ..model import ManualSalaryAdjustment, PayrollFigures


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def unpaid_leave_days(self, leaves: Sequence[LeaveApplication], *, year: int, month: int) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def settle(
        self,
        *,
        base_salary: Optional[Decimal],
        year: int,
        month: int,
        leaves: Sequence[LeaveApplication],
        adjustments: Sequence[ManualSalaryAdjustment],
    ) -> PayrollFigures:
        raise NotImplementedError
