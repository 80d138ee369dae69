from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..common.ids import new_id
from ..common.money import to_decimal
from ..core.enums import FeeAdjustmentType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall, fetchone, load_json
from .model import FeeAdjustment, FeeComponent, FeePayment, FeeRecord, FeeTemplate, MonthlyFee
from .repository import FeeRepository


def _to_template(r: dict) -> FeeTemplate:
    raw = load_json(r.get("monthly_breakdown"))
    breakdown: Optional[tuple[MonthlyFee, ...]] = None
    # Older rows store an empty object instead of NULL.
    if isinstance(raw, list) and raw:
        breakdown = tuple(
            MonthlyFee(
                month=str(m.get("month", "")),
                total=to_decimal(m.get("total")),
                breakdown=tuple(
                    FeeComponent(component=str(c.get("component", "")), amount=to_decimal(c.get("amount")))
                    for c in (m.get("breakdown") or [])
                ),
            )
            for m in raw
        )
    return FeeTemplate(
        template_id=r["id"],
        branch_id=r["branch_id"],
        name=r["name"],
        grade_level=int(r["grade_level"]),
        amount=to_decimal(r["amount"]),
        monthly_breakdown=breakdown,
    )


def row_to_fee_record(r: dict) -> FeeRecord:
    return FeeRecord(
        student_id=r["student_id"],
        total_amount=to_decimal(r["total_amount"]),
        paid_amount=to_decimal(r["paid_amount"]),
        due_date=as_date(r["due_date"]),
        previous_session_dues=to_decimal(r.get("previous_session_dues")),
    )


class MySQLFeeRepository(FeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_template(self, template_id: str) -> Optional[FeeTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, branch_id, name, grade_level, amount, monthly_breakdown
                FROM fee_templates
                WHERE id=%s
                """,
                (template_id,),
            )
            r = fetchone(cur)
            return _to_template(r) if r else None

    def get_record(self, student_id: str) -> Optional[FeeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, total_amount, paid_amount, due_date, previous_session_dues
                FROM fee_records
                WHERE student_id=%s
                """,
                (student_id,),
            )
            r = fetchone(cur)
            return row_to_fee_record(r) if r else None

    def list_records(self, student_ids: Sequence[str]) -> dict[str, FeeRecord]:
        ids = list(student_ids)
        if not ids:
            return {}
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT student_id, total_amount, paid_amount, due_date, previous_session_dues
                FROM fee_records
                WHERE student_id IN ({placeholders})
                """,
                tuple(ids),
            )
            return {r["student_id"]: row_to_fee_record(r) for r in fetchall(cur)}

    def record_payment(
        self,
        *,
        student_id: str,
        amount: Decimal,
        paid_date: date,
        transaction_id: str,
        details: Optional[str] = None,
    ) -> Optional[FeePayment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT total_amount, paid_amount FROM fee_records WHERE student_id=%s FOR UPDATE",
                (student_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            outstanding = to_decimal(r["total_amount"]) - to_decimal(r["paid_amount"])
            if amount > outstanding:
                return None

            payment = FeePayment(
                payment_id=new_id("pay"),
                student_id=student_id,
                amount=amount,
                paid_date=paid_date,
                transaction_id=transaction_id,
                details=details,
            )
            cur.execute(
                """
                INSERT INTO fee_payments(id, student_id, amount, paid_date, transaction_id, details)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (payment.payment_id, student_id, amount, paid_date, transaction_id, details),
            )
            cur.execute(
                "UPDATE fee_records SET paid_amount = paid_amount + %s WHERE student_id=%s",
                (amount, student_id),
            )
            return payment

    def add_adjustment(
        self,
        *,
        student_id: str,
        amount: Decimal,
        adjustment_type: FeeAdjustmentType,
        reason: str,
        adjusted_by: str,
        adjusted_on: date,
    ) -> FeeAdjustment:
        adjustment = FeeAdjustment(
            adjustment_id=new_id("adj"),
            student_id=student_id,
            amount=amount,
            adjustment_type=adjustment_type,
            reason=reason,
            adjusted_by=adjusted_by,
            adjusted_on=adjusted_on,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO fee_adjustments(id, student_id, amount, type, reason, adjusted_by, adjusted_on)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    adjustment.adjustment_id,
                    student_id,
                    amount,
                    adjustment_type.value,
                    reason,
                    adjusted_by,
                    adjusted_on,
                ),
            )
            cur.execute(
                "UPDATE fee_records SET total_amount = GREATEST(paid_amount, total_amount + %s) WHERE student_id=%s",
                (amount, student_id),
            )
        return adjustment

    def list_payments(self, student_id: str) -> Sequence[FeePayment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, student_id, amount, paid_date, transaction_id, details
                FROM fee_payments
                WHERE student_id=%s
                ORDER BY paid_date, created_at
                """,
                (student_id,),
            )
            return [
                FeePayment(
                    payment_id=r["id"],
                    student_id=r["student_id"],
                    amount=to_decimal(r["amount"]),
                    paid_date=as_date(r["paid_date"]),
                    transaction_id=r["transaction_id"],
                    details=r.get("details"),
                )
                for r in fetchall(cur)
            ]

    def list_adjustments(self, student_id: str) -> Sequence[FeeAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, student_id, amount, type, reason, adjusted_by, adjusted_on
                FROM fee_adjustments
                WHERE student_id=%s
                ORDER BY adjusted_on, created_at
                """,
                (student_id,),
            )
            return [
                FeeAdjustment(
                    adjustment_id=r["id"],
                    student_id=r["student_id"],
                    amount=to_decimal(r["amount"]),
                    adjustment_type=FeeAdjustmentType(r["type"]),
                    reason=r["reason"],
                    adjusted_by=r["adjusted_by"],
                    adjusted_on=as_date(r["adjusted_on"]),
                )
                for r in fetchall(cur)
            ]
