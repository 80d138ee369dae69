from __future__ import annotations

import io

from flask import Flask, request, send_file

from ..common.http import current_principal, json_body, require_field, respond
from ..container import Container
from .export import payroll_workbook


def register(app: Flask, container: Container) -> None:
    @app.route("/api/branches/<branch_id>/payroll/<month>", methods=["GET"], endpoint="monthly_payroll")
    def monthly_payroll(branch_id: str, month: str):
        records = container.payroll_service.build_monthly_payroll(
            principal=current_principal(), branch_id=branch_id, month=month
        )
        return respond(records)

    @app.route("/api/branches/<branch_id>/payroll/<month>/export", methods=["GET"], endpoint="export_payroll")
    def export_payroll(branch_id: str, month: str):
        records = container.payroll_service.list_month(principal=current_principal(), branch_id=branch_id, month=month)
        return send_file(
            io.BytesIO(payroll_workbook(records)),
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            as_attachment=True,
            download_name=f"payroll-{branch_id}-{month}.xlsx",
        )

    @app.route("/api/payroll/process", methods=["POST"], endpoint="process_payroll")
    def process_payroll():
        data = json_body()
        record_ids = require_field(data, "record_ids")
        if not isinstance(record_ids, list):
            record_ids = [record_ids]
        result = container.payroll_service.process_payroll(
            principal=current_principal(), record_ids=[str(r) for r in record_ids]
        )
        return respond(result)

    @app.route("/api/payroll/records/<record_id>/pay", methods=["POST"], endpoint="pay_payroll_record")
    def pay_payroll_record(record_id: str):
        record = container.payroll_service.pay_record(principal=current_principal(), record_id=record_id)
        return respond(record)

    @app.route("/api/staff/<staff_id>/payroll/<month>/recalculate", methods=["POST"], endpoint="recalculate_payroll")
    def recalculate_payroll(staff_id: str, month: str):
        record = container.payroll_service.recalculate_staff(
            principal=current_principal(), staff_id=staff_id, month=month
        )
        return respond(record)

    @app.route("/api/staff/<staff_id>/salary-adjustments", methods=["GET", "POST"], endpoint="salary_adjustments")
    def salary_adjustments(staff_id: str):
        principal = current_principal()
        if request.method == "GET":
            month = request.args.get("month", "")
            return respond(
                container.payroll_service.list_manual_adjustments(principal=principal, staff_id=staff_id, month=month)
            )

        data = json_body()
        adjustment = container.payroll_service.add_manual_adjustment(
            principal=principal,
            staff_id=staff_id,
            month=str(require_field(data, "month")),
            amount=require_field(data, "amount"),
            reason=str(data.get("reason") or ""),
        )
        return respond(adjustment, 201)
