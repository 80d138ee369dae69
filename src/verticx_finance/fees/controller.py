from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_principal, json_body, require_field, respond
from ..container import Container
from .model import FeePayment


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students/<student_id>/fees", methods=["GET"], endpoint="student_fees")
    def student_fees(student_id: str):
        details = container.fee_service.get_student_fee_details(principal=current_principal(), student_id=student_id)
        return respond(details)

    @app.route("/api/students/<student_id>/fees/payments", methods=["POST"], endpoint="record_fee_payment")
    def record_fee_payment(student_id: str):
        data = json_body()
        paid_date = data.get("paid_date")
        payment = container.fee_service.record_payment(
            principal=current_principal(),
            student_id=student_id,
            amount=require_field(data, "amount"),
            transaction_id=str(require_field(data, "transaction_id")),
            details=str(data.get("details") or ""),
            paid_date=parse_iso_date(paid_date) if paid_date else None,
        )
        return respond(payment, 201)

    @app.route("/api/students/<student_id>/fees/adjustments", methods=["POST"], endpoint="add_fee_adjustment")
    def add_fee_adjustment(student_id: str):
        data = json_body()
        adjustment = container.fee_service.add_fee_adjustment(
            principal=current_principal(),
            student_id=student_id,
            adjustment_type=str(require_field(data, "type")),
            amount=require_field(data, "amount"),
            reason=str(data.get("reason") or ""),
        )
        return respond(adjustment, 201)

    @app.route("/api/students/<student_id>/fees/history", methods=["GET"], endpoint="fee_history")
    def fee_history(student_id: str):
        items = container.fee_service.get_fee_history(principal=current_principal(), student_id=student_id)
        return respond([{"kind": "payment" if isinstance(i, FeePayment) else "adjustment", "entry": i} for i in items])

    @app.route("/api/branches/<branch_id>/fees/overview", methods=["GET"], endpoint="branch_fee_overview")
    def branch_fee_overview(branch_id: str):
        overview = container.fee_service.get_branch_fee_overview(principal=current_principal(), branch_id=branch_id)
        return respond([{"month": o.month, "due": o.due, "paid": o.paid, "pending": o.pending} for o in overview])
