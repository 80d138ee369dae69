from __future__ import annotations

from datetime import date

import pytest

from verticx_finance.auth.principal import Principal
from verticx_finance.core.enums import LeaveStatus, Role
from verticx_finance.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from verticx_finance.leaves.service import LeaveService


@pytest.fixture
def service(leaves):
    return LeaveService(leaves)


def test_staff_can_apply_and_list_own_leaves(service, teacher):
    leave_id = service.apply_leave(
        principal=teacher,
        leave_type="Sick",
        start_date=date(2024, 9, 10),
        end_date=date(2024, 9, 12),
        reason="Fever",
    )

    mine = service.list_my_leaves(principal=teacher)
    assert [l.leave_id for l in mine] == [leave_id]
    assert mine[0].status == LeaveStatus.PENDING
    assert mine[0].branch_id == "br-1"


def test_students_cannot_apply_for_leave(service):
    student = Principal(user_id="stu-1", role=Role.STUDENT, branch_id="br-1")

    with pytest.raises(AuthorizationError):
        service.apply_leave(
            principal=student, leave_type="Sick", start_date=date(2024, 9, 1), end_date=date(2024, 9, 1), reason="x"
        )


def test_end_before_start_is_rejected(service, teacher):
    with pytest.raises(ValidationError):
        service.apply_leave(
            principal=teacher, leave_type="Sick", start_date=date(2024, 9, 5), end_date=date(2024, 9, 4), reason="x"
        )


def test_half_day_must_be_single_day(service, teacher):
    with pytest.raises(ValidationError):
        service.apply_leave(
            principal=teacher,
            leave_type="Casual",
            start_date=date(2024, 9, 5),
            end_date=date(2024, 9, 6),
            reason="Errand",
            is_half_day=True,
        )


def test_principal_approves_exactly_once(service, leaves, teacher, principal_user):
    leave_id = service.apply_leave(
        principal=teacher, leave_type="Sick", start_date=date(2024, 9, 10), end_date=date(2024, 9, 10), reason="x"
    )

    service.approve_leave(principal=principal_user, leave_id=leave_id, note=" ok ")

    decided = leaves.get_leave(leave_id)
    assert decided.status == LeaveStatus.APPROVED
    assert decided.decided_by == "prin-1"
    assert decided.reviewer_note == "ok"
    with pytest.raises(ValidationError):
        service.reject_leave(principal=principal_user, leave_id=leave_id)


def test_reviewer_cannot_decide_own_leave(service, principal_user):
    leave_id = service.apply_leave(
        principal=principal_user,
        leave_type="Casual",
        start_date=date(2024, 9, 10),
        end_date=date(2024, 9, 10),
        reason="x",
    )

    with pytest.raises(AuthorizationError):
        service.approve_leave(principal=principal_user, leave_id=leave_id)


def test_teacher_cannot_review(service, teacher):
    with pytest.raises(AuthorizationError):
        service.approve_leave(principal=teacher, leave_id="leave-1")


def test_unknown_leave_is_not_found(service, principal_user):
    with pytest.raises(NotFoundError):
        service.reject_leave(principal=principal_user, leave_id="nope")


def test_pending_list_is_branch_scoped(service, teacher, principal_user):
    service.apply_leave(
        principal=teacher, leave_type="Sick", start_date=date(2024, 9, 10), end_date=date(2024, 9, 10), reason="x"
    )
    outsider = Principal(user_id="t-2", role=Role.TEACHER, branch_id="br-2")
    service.apply_leave(
        principal=outsider, leave_type="Sick", start_date=date(2024, 9, 10), end_date=date(2024, 9, 10), reason="x"
    )

    pending = service.list_pending(principal=principal_user)

    assert [l.applicant_id for l in pending] == ["t-1"]
    with pytest.raises(AuthorizationError):
        service.list_pending(principal=principal_user, branch_id="br-2")
