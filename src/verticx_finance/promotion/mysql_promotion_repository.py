from __future__ import annotations

import json
from typing import Sequence

from ..academics.model import ArchivedStudentRecord, AttendanceEntry, GradeEntry, SchoolClass
from ..common.datetime_utils import parse_iso_date
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json
from ..fees.mysql_fee_repository import row_to_fee_record
from .repository import PromotionRepository, SettleFn
from .settlement import PromotionSettlement


def _archive_payload(archive: ArchivedStudentRecord) -> tuple[str, str]:
    grades = [{"course_id": g.course_id, "score": g.score} for g in archive.grades]
    attendance = [{"date": a.attendance_date.isoformat(), "status": a.status} for a in archive.attendance]
    return json.dumps(grades), json.dumps(attendance)


class MySQLPromotionRepository(PromotionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def apply_promotion(
        self,
        *,
        student_id: str,
        target_class: SchoolClass,
        archive: ArchivedStudentRecord,
        settle: SettleFn,
    ) -> PromotionSettlement:
        grades_json, attendance_json = _archive_payload(archive)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, total_amount, paid_amount, due_date, previous_session_dues
                FROM fee_records
                WHERE student_id=%s
                FOR UPDATE
                """,
                (student_id,),
            )
            r = fetchone(cur)
            current = row_to_fee_record(r) if r else None
            settlement = settle(current)
            fee_record = settlement.new_fee_record

            cur.execute(
                """
                INSERT INTO archived_student_records(
                    id, student_id, academic_session, final_class, grades, attendance, archived_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    archive.archive_id,
                    student_id,
                    archive.academic_session,
                    archive.final_class,
                    grades_json,
                    attendance_json,
                    archive.archived_at,
                ),
            )
            cur.execute(
                "UPDATE grades SET archived_session=%s WHERE student_id=%s AND archived_session IS NULL",
                (archive.academic_session, student_id),
            )
            cur.execute(
                "UPDATE attendance_records SET archived_session=%s WHERE student_id=%s AND archived_session IS NULL",
                (archive.academic_session, student_id),
            )
            if fee_record is not None:
                cur.execute(
                    """
                    INSERT INTO fee_records(student_id, total_amount, paid_amount, due_date, previous_session_dues)
                    VALUES(%s,%s,%s,%s,%s)
                    ON DUPLICATE KEY UPDATE
                        total_amount=VALUES(total_amount),
                        paid_amount=VALUES(paid_amount),
                        due_date=VALUES(due_date),
                        previous_session_dues=VALUES(previous_session_dues)
                    """,
                    (
                        student_id,
                        fee_record.total_amount,
                        fee_record.paid_amount,
                        fee_record.due_date,
                        fee_record.previous_session_dues,
                    ),
                )
            cur.execute(
                "UPDATE students SET class_id=%s, grade_level=%s WHERE id=%s",
                (target_class.class_id, target_class.grade_level, student_id),
            )
        return settlement

    def list_archives(self, student_id: str) -> Sequence[ArchivedStudentRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, student_id, academic_session, final_class, grades, attendance, archived_at
                FROM archived_student_records
                WHERE student_id=%s
                ORDER BY archived_at
                """,
                (student_id,),
            )
            out: list[ArchivedStudentRecord] = []
            for r in fetchall(cur):
                session = r["academic_session"]
                out.append(
                    ArchivedStudentRecord(
                        archive_id=r["id"],
                        student_id=r["student_id"],
                        academic_session=session,
                        final_class=r["final_class"],
                        archived_at=r["archived_at"],
                        grades=tuple(
                            GradeEntry(
                                student_id=r["student_id"],
                                course_id=g["course_id"],
                                score=float(g["score"]),
                                archived_session=session,
                            )
                            for g in (load_json(r["grades"]) or [])
                        ),
                        attendance=tuple(
                            AttendanceEntry(
                                student_id=r["student_id"],
                                attendance_date=parse_iso_date(a["date"]),
                                status=a["status"],
                                archived_session=session,
                            )
                            for a in (load_json(r["attendance"]) or [])
                        ),
                    )
                )
            return out
