"""Session promotion settlement.

Pure computations that close a student's fee position for the ending
session and open the next one with the arrears carried forward.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..academics.model import ArchivedStudentRecord, AttendanceEntry, GradeEntry, SchoolClass, Student
from ..common.datetime_utils import next_month_day
from ..common.ids import new_id
from ..common.money import ZERO, clamp_non_negative
from ..core.constants import FEE_DUE_DAY
from ..fees.model import FeeRecord, FeeTemplate


@dataclass(frozen=True)
class PromotionSettlement:
    student_id: str
    outstanding_balance: Decimal
    new_fee_record: Optional[FeeRecord]


def outstanding_balance(record: Optional[FeeRecord]) -> Decimal:
    if record is None:
        return ZERO
    return clamp_non_negative(record.total_amount - record.paid_amount)


def settle_promotion(
    *,
    student_id: str,
    current_record: Optional[FeeRecord],
    target_template: Optional[FeeTemplate],
    today: date,
    due_day: int = FEE_DUE_DAY,
) -> PromotionSettlement:
    """New-session fee position: the target template's fee plus carried arrears.

    A target class without a template contributes 0. A student with no fee
    record and nothing to pay gets no record.
    """
    arrears = outstanding_balance(current_record)
    template_amount = clamp_non_negative(target_template.amount) if target_template else ZERO
    new_total = template_amount + arrears

    if current_record is None and new_total <= 0:
        return PromotionSettlement(student_id=student_id, outstanding_balance=arrears, new_fee_record=None)

    return PromotionSettlement(
        student_id=student_id,
        outstanding_balance=arrears,
        new_fee_record=FeeRecord(
            student_id=student_id,
            total_amount=new_total,
            paid_amount=ZERO,
            due_date=next_month_day(today, due_day),
            previous_session_dues=arrears,
        ),
    )


def build_archive(
    *,
    student: Student,
    old_class: Optional[SchoolClass],
    academic_session: str,
    grades: Sequence[GradeEntry],
    attendance: Sequence[AttendanceEntry],
    archived_at: datetime,
) -> ArchivedStudentRecord:
    final_class = old_class.display_name if old_class else f"Grade {student.grade_level}"
    return ArchivedStudentRecord(
        archive_id=new_id("archive"),
        student_id=student.student_id,
        academic_session=academic_session,
        final_class=final_class,
        archived_at=archived_at,
        grades=tuple(grades),
        attendance=tuple(attendance),
    )
