"""Payment ledger reduction.

Cumulative payments are applied oldest-first: arrears carried from the
previous session, then each session month in order. There is no way to
target a payment at a specific future month.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Mapping

from ..common.money import ZERO, clamp_non_negative
from ..core.enums import MonthlyDueStatus
from .model import LedgerAllocation, MonthlyDue


def month_status(balance: Decimal, paid: Decimal) -> MonthlyDueStatus:
    if balance <= 0:
        return MonthlyDueStatus.PAID
    if paid > 0:
        return MonthlyDueStatus.PARTIALLY_PAID
    return MonthlyDueStatus.DUE


def reduce_ledger(
    *,
    paid_amount: Decimal,
    previous_session_dues: Decimal,
    dues: Mapping[str, Decimal],
    year_of: Callable[[str], int],
) -> LedgerAllocation:
    """Allocate ``paid_amount`` over previous dues and the ordered monthly dues.

    ``dues`` must iterate in session order. Never allocates more than
    ``paid_amount``; negative inputs are treated as zero.
    """
    tracker = clamp_non_negative(paid_amount)
    previous = clamp_non_negative(previous_session_dues)

    previous_dues_paid = min(tracker, previous)
    tracker -= previous_dues_paid

    months: list[MonthlyDue] = []
    for label, raw_due in dues.items():
        due = clamp_non_negative(raw_due)
        # Once the payments run out every later month keeps zero paid.
        paid = min(tracker, due) if tracker > 0 else ZERO
        tracker -= paid
        balance = due - paid
        months.append(
            MonthlyDue(
                month=label,
                year=year_of(label),
                total=due,
                paid=paid,
                balance=balance,
                status=month_status(balance, paid),
            )
        )

    return LedgerAllocation(previous_dues_paid=previous_dues_paid, months=tuple(months), unallocated=tracker)
