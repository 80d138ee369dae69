from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AcademicSession, AttendanceEntry, GradeEntry, SchoolClass, Student


class AcademicsRepository(Protocol):
    """Read access to sessions, classes and students, plus class moves."""

    def get_session(self, branch_id: str) -> Optional[AcademicSession]:
        raise NotImplementedError

    def set_session_start(self, branch_id: str, start_date: date) -> bool:
        raise NotImplementedError

    def get_class(self, class_id: str) -> Optional[SchoolClass]:
        raise NotImplementedError

    def get_student(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def list_students(self, branch_id: str) -> Sequence[Student]:
        raise NotImplementedError

    def list_live_grades(self, student_id: str) -> Sequence[GradeEntry]:
        raise NotImplementedError

    def list_live_attendance(self, student_id: str) -> Sequence[AttendanceEntry]:
        raise NotImplementedError

    def move_student(self, *, student_id: str, target_class: SchoolClass) -> bool:
        raise NotImplementedError
