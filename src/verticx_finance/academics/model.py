from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class AcademicSession:
    branch_id: str
    start_date: date


@dataclass(frozen=True)
class SchoolClass:
    class_id: str
    branch_id: str
    grade_level: int
    section: str
    fee_template_id: Optional[str] = None
    student_ids: tuple[str, ...] = ()

    @property
    def display_name(self) -> str:
        return f"Grade {self.grade_level} - {self.section}"


@dataclass(frozen=True)
class Student:
    student_id: str
    branch_id: str
    name: str
    class_id: Optional[str]
    grade_level: int
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class GradeEntry:
    student_id: str
    course_id: str
    score: float
    archived_session: Optional[str] = None


@dataclass(frozen=True)
class AttendanceEntry:
    student_id: str
    attendance_date: date
    status: str
    archived_session: Optional[str] = None


@dataclass(frozen=True)
class ArchivedStudentRecord:
    """Snapshot of a student's live academic rows at promotion time."""

    archive_id: str
    student_id: str
    academic_session: str
    final_class: str
    archived_at: datetime
    grades: tuple[GradeEntry, ...] = field(default_factory=tuple)
    attendance: tuple[AttendanceEntry, ...] = field(default_factory=tuple)
