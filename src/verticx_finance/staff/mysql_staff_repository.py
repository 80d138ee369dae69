from __future__ import annotations

from typing import Optional, Sequence

from ..auth.principal import STAFF_ROLES
from ..common.money import optional_decimal
from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import StaffMember
from .repository import StaffRepository


def _to_staff(r: dict) -> StaffMember:
    return StaffMember(
        staff_id=r["id"],
        branch_id=r["branch_id"],
        name=r["name"],
        role=Role(r["role"]),
        salary=optional_decimal(r.get("salary")),
    )


class MySQLStaffRepository(StaffRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, staff_id: str) -> Optional[StaffMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, branch_id, name, role, salary FROM users WHERE id=%s", (staff_id,))
            r = fetchone(cur)
            if not r or Role(r["role"]) not in STAFF_ROLES:
                return None
            return _to_staff(r)

    def list_payroll_staff(self, branch_id: str, *, exclude_staff_id: Optional[str] = None) -> Sequence[StaffMember]:
        roles = sorted(r.value for r in STAFF_ROLES)
        placeholders = ",".join(["%s"] * len(roles))
        clauses = [f"branch_id=%s AND role IN ({placeholders})"]
        params: list[object] = [branch_id, *roles]
        if exclude_staff_id is not None:
            clauses.append("id<>%s")
            params.append(exclude_staff_id)
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, branch_id, name, role, salary
                FROM users
                WHERE {where}
                ORDER BY name
                """,
                tuple(params),
            )
            return [_to_staff(r) for r in fetchall(cur)]
