from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import ManualSalaryAdjustment, PayrollRecord


class PayrollRepository(Protocol):
    def get_record(self, *, staff_id: str, month: str) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def get_by_id(self, record_id: str) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def list_for_month(self, *, branch_id: str, month: str) -> Sequence[PayrollRecord]:
        raise NotImplementedError

    def save_unless_paid(self, record: PayrollRecord) -> PayrollRecord:
        """Insert or update the (staff_id, month) row unless it is already Paid.

        Returns the stored row: the given record, or the frozen one untouched.
        """
        raise NotImplementedError

    def mark_paid(self, *, record_id: str, paid_by: str, paid_at: datetime) -> bool:
        """Flip a Pending record to Paid; False for any other status."""
        raise NotImplementedError

    def add_manual_adjustment(
        self,
        *,
        branch_id: str,
        staff_id: str,
        month: str,
        amount: Decimal,
        reason: str,
        adjusted_by: str,
        adjusted_at: datetime,
    ) -> ManualSalaryAdjustment:
        raise NotImplementedError

    def list_manual_adjustments(self, *, staff_id: str, month: str) -> Sequence[ManualSalaryAdjustment]:
        raise NotImplementedError
