from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall, fetchone
from .model import AcademicSession, AttendanceEntry, GradeEntry, SchoolClass, Student
from .repository import AcademicsRepository


class MySQLAcademicsRepository(AcademicsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_session(self, branch_id: str) -> Optional[AcademicSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, academic_session_start_date FROM branches WHERE id=%s",
                (branch_id,),
            )
            r = fetchone(cur)
            if not r or not r.get("academic_session_start_date"):
                return None
            return AcademicSession(branch_id=r["id"], start_date=as_date(r["academic_session_start_date"]))

    def set_session_start(self, branch_id: str, start_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE branches SET academic_session_start_date=%s WHERE id=%s",
                (start_date, branch_id),
            )
            return cur.rowcount > 0

    def get_class(self, class_id: str) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, branch_id, grade_level, section, fee_template_id
                FROM school_classes
                WHERE id=%s
                """,
                (class_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            cur.execute("SELECT id FROM students WHERE class_id=%s ORDER BY id", (class_id,))
            roster = tuple(row["id"] for row in fetchall(cur))
            return SchoolClass(
                class_id=r["id"],
                branch_id=r["branch_id"],
                grade_level=int(r["grade_level"]),
                section=r["section"],
                fee_template_id=r.get("fee_template_id"),
                student_ids=roster,
            )

    def get_student(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, branch_id, name, class_id, grade_level, parent_id FROM students WHERE id=%s",
                (student_id,),
            )
            r = fetchone(cur)
            return _to_student(r) if r else None

    def list_students(self, branch_id: str) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, branch_id, name, class_id, grade_level, parent_id FROM students WHERE branch_id=%s ORDER BY name",
                (branch_id,),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def list_live_grades(self, student_id: str) -> Sequence[GradeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, course_id, score
                FROM grades
                WHERE student_id=%s AND archived_session IS NULL
                """,
                (student_id,),
            )
            return [
                GradeEntry(student_id=r["student_id"], course_id=r["course_id"], score=float(r["score"]))
                for r in fetchall(cur)
            ]

    def list_live_attendance(self, student_id: str) -> Sequence[AttendanceEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, attendance_date, status
                FROM attendance_records
                WHERE student_id=%s AND archived_session IS NULL
                ORDER BY attendance_date
                """,
                (student_id,),
            )
            return [
                AttendanceEntry(
                    student_id=r["student_id"],
                    attendance_date=as_date(r["attendance_date"]),
                    status=r["status"],
                )
                for r in fetchall(cur)
            ]

    def move_student(self, *, student_id: str, target_class: SchoolClass) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET class_id=%s, grade_level=%s WHERE id=%s",
                (target_class.class_id, target_class.grade_level, student_id),
            )
            return cur.rowcount > 0


def _to_student(r: dict) -> Student:
    return Student(
        student_id=r["id"],
        branch_id=r["branch_id"],
        name=r["name"],
        class_id=r.get("class_id"),
        grade_level=int(r["grade_level"]),
        parent_id=r.get("parent_id"),
    )
