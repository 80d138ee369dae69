from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import FeeAdjustmentType
from .model import FeeAdjustment, FeePayment, FeeRecord, FeeTemplate


class FeeRepository(Protocol):
    """Persistence for fee templates, fee records and the append-only fee ledger."""

    def get_template(self, template_id: str) -> Optional[FeeTemplate]:
        raise NotImplementedError

    def get_record(self, student_id: str) -> Optional[FeeRecord]:
        raise NotImplementedError

    def list_records(self, student_ids: Sequence[str]) -> dict[str, FeeRecord]:
        raise NotImplementedError

    def record_payment(
        self,
        *,
        student_id: str,
        amount: Decimal,
        paid_date: date,
        transaction_id: str,
        details: Optional[str] = None,
    ) -> Optional[FeePayment]:
        """Insert the payment and raise ``paid_amount`` in one transaction.

        Returns None when the record is missing or the amount no longer fits
        the outstanding balance at lock time.
        """
        raise NotImplementedError

    def add_adjustment(
        self,
        *,
        student_id: str,
        amount: Decimal,
        adjustment_type: FeeAdjustmentType,
        reason: str,
        adjusted_by: str,
        adjusted_on: date,
    ) -> FeeAdjustment:
        """Append the adjustment and apply it to ``total_amount`` in one transaction."""
        raise NotImplementedError

    def list_payments(self, student_id: str) -> Sequence[FeePayment]:
        raise NotImplementedError

    def list_adjustments(self, student_id: str) -> Sequence[FeeAdjustment]:
        raise NotImplementedError
