from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_principal, json_body, require_field, respond
from ..container import Container
from .service import PromotionBatch


def _ids(value) -> list[str]:
    if not isinstance(value, list):
        value = [value]
    return [str(v) for v in value]


def register(app: Flask, container: Container) -> None:
    @app.route("/api/promotions", methods=["POST"], endpoint="promote_students")
    def promote_students():
        data = json_body()
        settlements = container.promotion_service.promote_students(
            principal=current_principal(),
            student_ids=_ids(require_field(data, "student_ids")),
            target_class_id=str(require_field(data, "target_class_id")),
            academic_session=str(data.get("academic_session") or ""),
        )
        return respond(settlements)

    @app.route("/api/demotions", methods=["POST"], endpoint="demote_students")
    def demote_students():
        data = json_body()
        moved = container.promotion_service.demote_students(
            principal=current_principal(),
            student_ids=_ids(require_field(data, "student_ids")),
            target_class_id=str(require_field(data, "target_class_id")),
        )
        return respond({"moved": moved})

    @app.route("/api/branches/<branch_id>/sessions", methods=["POST"], endpoint="start_new_session")
    def start_new_session(branch_id: str):
        data = json_body()
        batches = [
            PromotionBatch(
                student_ids=_ids(require_field(b, "student_ids")),
                target_class_id=str(require_field(b, "target_class_id")),
            )
            for b in (data.get("promotions") or [])
        ]
        settlements = container.promotion_service.start_new_session(
            principal=current_principal(),
            branch_id=branch_id,
            new_start_date=parse_iso_date(str(require_field(data, "start_date"))),
            promotions=batches,
        )
        return respond(settlements, 201)

    @app.route("/api/students/<student_id>/archives", methods=["GET"], endpoint="student_archives")
    def student_archives(student_id: str):
        return respond(container.promotion_service.list_archives(principal=current_principal(), student_id=student_id))
