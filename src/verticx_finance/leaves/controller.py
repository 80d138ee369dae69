from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_principal, json_body, require_field, respond
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/leaves", methods=["POST"], endpoint="apply_leave")
    def apply_leave():
        data = json_body()
        leave_id = container.leave_service.apply_leave(
            principal=current_principal(),
            leave_type=str(data.get("leave_type") or ""),
            start_date=parse_iso_date(str(require_field(data, "start_date"))),
            end_date=parse_iso_date(str(require_field(data, "end_date"))),
            reason=str(data.get("reason") or ""),
            is_half_day=bool(data.get("is_half_day", False)),
        )
        return respond({"leave_id": leave_id}, 201)

    @app.route("/api/leaves/mine", methods=["GET"], endpoint="my_leaves")
    def my_leaves():
        return respond(container.leave_service.list_my_leaves(principal=current_principal()))

    @app.route("/api/branches/<branch_id>/leaves/pending", methods=["GET"], endpoint="pending_leaves")
    def pending_leaves(branch_id: str):
        return respond(container.leave_service.list_pending(principal=current_principal(), branch_id=branch_id))

    @app.route("/api/leaves/<leave_id>/approve", methods=["POST"], endpoint="approve_leave")
    def approve_leave(leave_id: str):
        data = json_body()
        container.leave_service.approve_leave(
            principal=current_principal(), leave_id=leave_id, note=str(data.get("note") or "")
        )
        return respond({"leave_id": leave_id, "status": "Approved"})

    @app.route("/api/leaves/<leave_id>/reject", methods=["POST"], endpoint="reject_leave")
    def reject_leave(leave_id: str):
        data = json_body()
        container.leave_service.reject_leave(
            principal=current_principal(), leave_id=leave_id, note=str(data.get("note") or "")
        )
        return respond({"leave_id": leave_id, "status": "Rejected"})
