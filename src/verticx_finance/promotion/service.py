from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from functools import partial
from typing import Optional, Sequence

from ..academics.model import SchoolClass, Student
from ..academics.repository import AcademicsRepository
from ..auth.principal import FINANCE_ROLES, PAYROLL_ROLES, Principal
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import FEE_DUE_DAY
from ..core.exceptions import NotFoundError, ValidationError
from ..fees.model import FeeRecord, FeeTemplate
from ..fees.repository import FeeRepository
from .repository import PromotionRepository
from .settlement import PromotionSettlement, build_archive, settle_promotion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromotionBatch:
    student_ids: Sequence[str]
    target_class_id: str


@dataclass(frozen=True)
class _ResolvedBatch:
    target: SchoolClass
    template: Optional[FeeTemplate]
    students: tuple[Student, ...]


def session_label(start: date) -> str:
    return f"{start.year}-{start.year + 1}"


class PromotionService:
    def __init__(
        self,
        academics: AcademicsRepository,
        fees: FeeRepository,
        promotions: PromotionRepository,
        *,
        due_day: int = FEE_DUE_DAY,
    ):
        self._academics = academics
        self._fees = fees
        self._promotions = promotions
        self._due_day = int(due_day)

    def _target_class(self, principal: Principal, class_id: str) -> SchoolClass:
        target = self._academics.get_class(class_id)
        if not target:
            raise NotFoundError("Target class not found")
        principal.require_branch(target.branch_id)
        return target

    def _resolve(
        self,
        principal: Principal,
        student_ids: Sequence[str],
        target_class_id: str,
        *,
        with_template: bool = True,
    ) -> _ResolvedBatch:
        """Check a whole batch before anything is written.

        Unknown students are dropped; a student from another branch fails the batch.
        """
        target = self._target_class(principal, target_class_id)

        students: list[Student] = []
        for student_id in dict.fromkeys(student_ids):
            student = self._academics.get_student(student_id)
            if not student:
                logger.warning("Skipping unknown student %s", student_id)
                continue
            if student.branch_id != target.branch_id:
                raise ValidationError(f"Student {student_id} belongs to another branch")
            students.append(student)

        template = None
        if with_template and target.fee_template_id:
            template = self._fees.get_template(target.fee_template_id)
        if with_template and template is None:
            logger.warning("Class %s has no fee template; promoting with arrears only", target.class_id)
        return _ResolvedBatch(target=target, template=template, students=tuple(students))

    def _promote(self, batch: _ResolvedBatch, *, academic_session: str, now: datetime) -> list[PromotionSettlement]:
        target = batch.target
        settlements: list[PromotionSettlement] = []
        for student in batch.students:
            old_class = self._academics.get_class(student.class_id) if student.class_id else None
            archive = build_archive(
                student=student,
                old_class=old_class,
                academic_session=academic_session,
                grades=self._academics.list_live_grades(student.student_id),
                attendance=self._academics.list_live_attendance(student.student_id),
                archived_at=now,
            )
            # Settled against the fee row as locked by the promotion transaction.
            settlement = self._promotions.apply_promotion(
                student_id=student.student_id,
                target_class=target,
                archive=archive,
                settle=partial(
                    self._settle,
                    student.student_id,
                    template=batch.template,
                    today=now.date(),
                ),
            )
            settlements.append(settlement)
            logger.info(
                "Promoted %s to %s with %s carried forward",
                student.student_id,
                target.display_name,
                settlement.outstanding_balance,
            )
        return settlements

    def _settle(
        self,
        student_id: str,
        current_record: Optional[FeeRecord],
        *,
        template: Optional[FeeTemplate],
        today: date,
    ) -> PromotionSettlement:
        return settle_promotion(
            student_id=student_id,
            current_record=current_record,
            target_template=template,
            today=today,
            due_day=self._due_day,
        )

    def promote_students(
        self,
        *,
        principal: Principal,
        student_ids: Sequence[str],
        target_class_id: str,
        academic_session: str,
        now: Optional[datetime] = None,
    ) -> list[PromotionSettlement]:
        principal.require(*FINANCE_ROLES)
        academic_session = require_non_empty(academic_session, "Academic session")
        batch = self._resolve(principal, student_ids, target_class_id)
        return self._promote(batch, academic_session=academic_session, now=now or now_local())

    def demote_students(self, *, principal: Principal, student_ids: Sequence[str], target_class_id: str) -> int:
        """Move students to another class without touching fees or history."""
        principal.require(*FINANCE_ROLES)
        batch = self._resolve(principal, student_ids, target_class_id, with_template=False)

        moved = 0
        for student in batch.students:
            if self._academics.move_student(student_id=student.student_id, target_class=batch.target):
                moved += 1
        return moved

    def start_new_session(
        self,
        *,
        principal: Principal,
        branch_id: str,
        new_start_date: date,
        promotions: Sequence[PromotionBatch] = (),
        now: Optional[datetime] = None,
    ) -> list[PromotionSettlement]:
        """Move the branch to a new session and settle the listed promotions.

        Every batch is resolved before the session date changes, so an invalid
        batch leaves the branch and its students untouched. The ending
        session's label keys the archived rows.
        """
        principal.require(*PAYROLL_ROLES)
        principal.require_branch(branch_id)

        current = self._academics.get_session(branch_id)
        if current and new_start_date <= current.start_date:
            raise ValidationError("New session must start after the current one")
        ending_label = session_label(current.start_date) if current else session_label(date(new_start_date.year - 1, 1, 1))

        resolved = [self._resolve(principal, b.student_ids, b.target_class_id) for b in promotions]
        for batch in resolved:
            if batch.target.branch_id != branch_id:
                raise ValidationError(f"Class {batch.target.class_id} belongs to another branch")

        if not self._academics.set_session_start(branch_id, new_start_date):
            raise NotFoundError("Branch not found")
        logger.info("Branch %s started a new session on %s", branch_id, new_start_date.isoformat())

        now = now or now_local()
        settlements: list[PromotionSettlement] = []
        for batch in resolved:
            settlements.extend(self._promote(batch, academic_session=ending_label, now=now))
        return settlements

    def list_archives(self, *, principal: Principal, student_id: str):
        principal.require(*FINANCE_ROLES)
        student = self._academics.get_student(student_id)
        if not student:
            raise NotFoundError("Student not found")
        principal.require_branch(student.branch_id)
        return self._promotions.list_archives(student_id)
