from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..common.ids import new_id
from ..common.money import optional_decimal, to_decimal
from ..core.enums import PayrollStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ManualSalaryAdjustment, PayrollRecord
from .repository import PayrollRepository

_COLUMNS = """
    id, branch_id, staff_id, staff_name, staff_role, month, base_salary,
    unpaid_leave_days, leave_deductions, manual_adjustments_total, net_payable,
    status, paid_at, paid_by
"""


def _to_record(r: dict) -> PayrollRecord:
    return PayrollRecord(
        record_id=r["id"],
        branch_id=r["branch_id"],
        staff_id=r["staff_id"],
        staff_name=r["staff_name"],
        staff_role=Role(r["staff_role"]),
        month=r["month"],
        base_salary=optional_decimal(r.get("base_salary")),
        unpaid_leave_days=to_decimal(r.get("unpaid_leave_days")),
        leave_deductions=optional_decimal(r.get("leave_deductions")),
        manual_adjustments_total=to_decimal(r.get("manual_adjustments_total")),
        net_payable=optional_decimal(r.get("net_payable")),
        status=PayrollStatus(r["status"]),
        paid_at=r.get("paid_at"),
        paid_by=r.get("paid_by"),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_record(self, *, staff_id: str, month: str) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payroll_records WHERE staff_id=%s AND month=%s",
                (staff_id, month),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_by_id(self, record_id: str) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payroll_records WHERE id=%s", (record_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_month(self, *, branch_id: str, month: str) -> Sequence[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payroll_records
                WHERE branch_id=%s AND month=%s
                ORDER BY staff_name
                """,
                (branch_id, month),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def save_unless_paid(self, record: PayrollRecord) -> PayrollRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payroll_records WHERE staff_id=%s AND month=%s FOR UPDATE",
                (record.staff_id, record.month),
            )
            existing = fetchone(cur)
            if existing and existing["status"] == PayrollStatus.PAID.value:
                return _to_record(existing)

            values = (
                record.base_salary,
                record.unpaid_leave_days,
                record.leave_deductions,
                record.manual_adjustments_total,
                record.net_payable,
                record.status.value,
            )
            if existing:
                cur.execute(
                    """
                    UPDATE payroll_records
                    SET base_salary=%s, unpaid_leave_days=%s, leave_deductions=%s,
                        manual_adjustments_total=%s, net_payable=%s, status=%s
                    WHERE id=%s AND status<>%s
                    """,
                    values + (existing["id"], PayrollStatus.PAID.value),
                )
                return _to_record({**existing, **_row_values(record), "id": existing["id"]})

            cur.execute(
                """
                INSERT INTO payroll_records(
                    id, branch_id, staff_id, staff_name, staff_role, month,
                    base_salary, unpaid_leave_days, leave_deductions,
                    manual_adjustments_total, net_payable, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.record_id,
                    record.branch_id,
                    record.staff_id,
                    record.staff_name,
                    record.staff_role.value,
                    record.month,
                )
                + values,
            )
            return record

    def mark_paid(self, *, record_id: str, paid_by: str, paid_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payroll_records
                SET status=%s, paid_at=%s, paid_by=%s
                WHERE id=%s AND status=%s
                """,
                (PayrollStatus.PAID.value, paid_at, paid_by, record_id, PayrollStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def add_manual_adjustment(
        self,
        *,
        branch_id: str,
        staff_id: str,
        month: str,
        amount: Decimal,
        reason: str,
        adjusted_by: str,
        adjusted_at: datetime,
    ) -> ManualSalaryAdjustment:
        adjustment = ManualSalaryAdjustment(
            adjustment_id=new_id("sal-adj"),
            branch_id=branch_id,
            staff_id=staff_id,
            month=month,
            amount=amount,
            reason=reason,
            adjusted_by=adjusted_by,
            adjusted_at=adjusted_at,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO manual_salary_adjustments(
                    id, branch_id, staff_id, month, amount, reason, adjusted_by, adjusted_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    adjustment.adjustment_id,
                    branch_id,
                    staff_id,
                    month,
                    amount,
                    reason,
                    adjusted_by,
                    adjusted_at,
                ),
            )
        return adjustment

    def list_manual_adjustments(self, *, staff_id: str, month: str) -> Sequence[ManualSalaryAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, branch_id, staff_id, month, amount, reason, adjusted_by, adjusted_at
                FROM manual_salary_adjustments
                WHERE staff_id=%s AND month=%s
                ORDER BY adjusted_at
                """,
                (staff_id, month),
            )
            return [
                ManualSalaryAdjustment(
                    adjustment_id=r["id"],
                    branch_id=r["branch_id"],
                    staff_id=r["staff_id"],
                    month=r["month"],
                    amount=to_decimal(r["amount"]),
                    reason=r["reason"],
                    adjusted_by=r["adjusted_by"],
                    adjusted_at=r["adjusted_at"],
                )
                for r in fetchall(cur)
            ]


def _row_values(record: PayrollRecord) -> dict:
    return {
        "base_salary": record.base_salary,
        "unpaid_leave_days": record.unpaid_leave_days,
        "leave_deductions": record.leave_deductions,
        "manual_adjustments_total": record.manual_adjustments_total,
        "net_payable": record.net_payable,
        "status": record.status.value,
    }
