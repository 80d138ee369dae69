from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from ..academics.model import ArchivedStudentRecord, SchoolClass
from ..fees.model import FeeRecord
from .settlement import PromotionSettlement

SettleFn = Callable[[Optional[FeeRecord]], PromotionSettlement]


class PromotionRepository(Protocol):
    def apply_promotion(
        self,
        *,
        student_id: str,
        target_class: SchoolClass,
        archive: ArchivedStudentRecord,
        settle: SettleFn,
    ) -> PromotionSettlement:
        """Archive, rotate live rows, reset the fee record and move the student atomically.

        ``settle`` receives the student's fee record as read under the row
        lock, so the carried balance reflects every committed payment.
        Live grade/attendance rows are stamped with the archived session
        instead of being deleted, so history stays queryable.
        """
        raise NotImplementedError

    def list_archives(self, student_id: str) -> Sequence[ArchivedStudentRecord]:
        raise NotImplementedError
