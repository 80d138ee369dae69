from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.ids import new_id
from ..core.enums import LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall, fetchone
from .model import LeaveApplication
from .repository import LeaveRepository

_COLUMNS = """
    id, applicant_id, branch_id, leave_type, start_date, end_date, reason,
    is_half_day, status, created_at, decided_by, decided_at, reviewer_note
"""


def _to_leave(r: dict) -> LeaveApplication:
    return LeaveApplication(
        leave_id=r["id"],
        applicant_id=r["applicant_id"],
        branch_id=r["branch_id"],
        leave_type=r["leave_type"],
        start_date=as_date(r["start_date"]),
        end_date=as_date(r["end_date"]),
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        is_half_day=bool(r.get("is_half_day")),
        created_at=r.get("created_at"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        reviewer_note=r.get("reviewer_note"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_leave(
        self,
        *,
        applicant_id: str,
        branch_id: str,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
        is_half_day: bool,
    ) -> str:
        leave_id = new_id("leave")
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_applications(
                    id, applicant_id, branch_id, leave_type, start_date, end_date, reason, is_half_day, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    leave_id,
                    applicant_id,
                    branch_id,
                    leave_type,
                    start_date,
                    end_date,
                    reason,
                    int(bool(is_half_day)),
                    LeaveStatus.PENDING.value,
                ),
            )
        return leave_id

    def get_leave(self, leave_id: str) -> Optional[LeaveApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_applications WHERE id=%s", (leave_id,))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def list_leaves(
        self,
        *,
        branch_id: Optional[str] = None,
        status: Optional[LeaveStatus] = None,
        applicant_id: Optional[str] = None,
        limit: int = 200,
    ) -> Sequence[LeaveApplication]:
        clauses = ["1=1"]
        params: list[object] = []

        if branch_id is not None:
            clauses.append("branch_id=%s")
            params.append(branch_id)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if applicant_id is not None:
            clauses.append("applicant_id=%s")
            params.append(applicant_id)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_applications
                WHERE {where}
                ORDER BY created_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def list_approved_overlapping(self, *, applicant_id: str, start: date, end: date) -> Sequence[LeaveApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_applications
                WHERE applicant_id=%s AND status=%s AND start_date <= %s AND end_date >= %s
                ORDER BY start_date
                """,
                (applicant_id, LeaveStatus.APPROVED.value, end, start),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def decide_leave(
        self,
        *,
        leave_id: str,
        status: LeaveStatus,
        decided_by: str,
        reviewer_note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_applications
                SET status=%s, decided_by=%s, decided_at=NOW(), reviewer_note=%s
                WHERE id=%s AND status=%s
                """,
                (status.value, decided_by, reviewer_note, leave_id, LeaveStatus.PENDING.value),
            )
            return cur.rowcount > 0
