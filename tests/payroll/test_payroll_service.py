from datetime import date, datetime
from decimal import Decimal

import pytest

from verticx_finance.auth.principal import Principal
from verticx_finance.core.enums import LeaveStatus, PayrollStatus, Role
from verticx_finance.core.exceptions import AuthorizationError, FrozenRecordConflict, ValidationError
from verticx_finance.leaves.model import LeaveApplication
from verticx_finance.payroll.service import PayrollService
from verticx_finance.staff.model import StaffMember


@pytest.fixture
def service(payroll, staff, leaves):
    staff.add(StaffMember(staff_id="t-1", branch_id="br-1", name="Meera", role=Role.TEACHER, salary=Decimal("30000")))
    staff.add(StaffMember(staff_id="lib-1", branch_id="br-1", name="Kabir", role=Role.LIBRARIAN, salary=None))
    staff.add(
        StaffMember(staff_id="prin-1", branch_id="br-1", name="Head", role=Role.PRINCIPAL, salary=Decimal("80000"))
    )
    staff.add(StaffMember(staff_id="t-9", branch_id="br-2", name="Other", role=Role.TEACHER, salary=Decimal("1000")))
    leaves.add(
        LeaveApplication(
            leave_id="lv-1",
            applicant_id="t-1",
            branch_id="br-1",
            leave_type="Unpaid",
            start_date=date(2024, 9, 10),
            end_date=date(2024, 9, 11),
            reason="Travel",
            status=LeaveStatus.APPROVED,
        )
    )
    return PayrollService(payroll, staff, leaves)


def _by_staff(records):
    return {r.staff_id: r for r in records}


def test_build_payroll_excludes_calling_principal(service, principal_user):
    records = _by_staff(service.build_monthly_payroll(principal=principal_user, branch_id="br-1", month="2024-09"))

    assert set(records) == {"t-1", "lib-1"}
    assert records["t-1"].net_payable == Decimal("28000")
    assert records["t-1"].status == PayrollStatus.PENDING
    assert records["lib-1"].status == PayrollStatus.SALARY_NOT_SET
    assert records["lib-1"].net_payable is None


def test_build_payroll_requires_payroll_role(service, registrar):
    with pytest.raises(AuthorizationError):
        service.build_monthly_payroll(principal=registrar, branch_id="br-1", month="2024-09")


def test_build_payroll_rejects_bad_month(service, principal_user):
    with pytest.raises(ValidationError):
        service.build_monthly_payroll(principal=principal_user, branch_id="br-1", month="09-2024")


def test_paid_record_is_frozen_against_later_changes(service, payroll, staff, principal_user):
    record = _by_staff(service.build_monthly_payroll(principal=principal_user, branch_id="br-1", month="2024-09"))["t-1"]
    service.process_payroll(principal=principal_user, record_ids=[record.record_id], now=datetime(2024, 9, 30, 17, 0))

    staff.add(StaffMember(staff_id="t-1", branch_id="br-1", name="Meera", role=Role.TEACHER, salary=Decimal("50000")))
    rebuilt = _by_staff(service.build_monthly_payroll(principal=principal_user, branch_id="br-1", month="2024-09"))

    assert rebuilt["t-1"].status == PayrollStatus.PAID
    assert rebuilt["t-1"].net_payable == Decimal("28000")
    assert rebuilt["t-1"].paid_by == "prin-1"
    assert rebuilt["t-1"].paid_at == datetime(2024, 9, 30, 17, 0)


def test_salary_not_set_is_recomputed_once_salary_exists(service, staff, principal_user):
    service.build_monthly_payroll(principal=principal_user, branch_id="br-1", month="2024-09")
    staff.add(
        StaffMember(staff_id="lib-1", branch_id="br-1", name="Kabir", role=Role.LIBRARIAN, salary=Decimal("21000"))
    )

    record = _by_staff(service.build_monthly_payroll(principal=principal_user, branch_id="br-1", month="2024-09"))[
        "lib-1"
    ]

    assert record.status == PayrollStatus.PENDING
    assert record.net_payable == Decimal("21000")


def test_process_payroll_is_idempotent(service, payroll, principal_user):
    records = _by_staff(service.build_monthly_payroll(principal=principal_user, branch_id="br-1", month="2024-09"))
    ids = [records["t-1"].record_id, records["lib-1"].record_id, "missing"]

    first = service.process_payroll(principal=principal_user, record_ids=ids, now=datetime(2024, 9, 30, 17, 0))
    second = service.process_payroll(principal=principal_user, record_ids=ids, now=datetime(2024, 10, 1, 9, 0))

    assert first.paid == [records["t-1"].record_id]
    assert set(first.skipped) == {records["lib-1"].record_id, "missing"}
    assert second.paid == []
    assert payroll.get_by_id(records["t-1"].record_id).paid_at == datetime(2024, 9, 30, 17, 0)


def test_direct_pay_or_recalculate_of_paid_record_conflicts(service, principal_user):
    record = _by_staff(service.build_monthly_payroll(principal=principal_user, branch_id="br-1", month="2024-09"))["t-1"]
    paid = service.pay_record(principal=principal_user, record_id=record.record_id)

    assert paid.status == PayrollStatus.PAID
    with pytest.raises(FrozenRecordConflict):
        service.pay_record(principal=principal_user, record_id=record.record_id)
    with pytest.raises(FrozenRecordConflict):
        service.recalculate_staff(principal=principal_user, staff_id="t-1", month="2024-09")


def test_pay_record_without_salary_is_rejected(service, principal_user):
    record = _by_staff(service.build_monthly_payroll(principal=principal_user, branch_id="br-1", month="2024-09"))[
        "lib-1"
    ]

    with pytest.raises(ValidationError):
        service.pay_record(principal=principal_user, record_id=record.record_id)


def test_manual_adjustment_changes_next_settlement(service, principal_user):
    service.build_monthly_payroll(principal=principal_user, branch_id="br-1", month="2024-09")
    service.add_manual_adjustment(
        principal=principal_user, staff_id="t-1", month="2024-09", amount="1500", reason="Exam duty"
    )

    record = service.recalculate_staff(principal=principal_user, staff_id="t-1", month="2024-09")

    assert record.manual_adjustments_total == Decimal("1500")
    assert record.net_payable == Decimal("29500")
    assert len(service.list_manual_adjustments(principal=principal_user, staff_id="t-1", month="2024-09")) == 1


@pytest.mark.parametrize("amount,reason", [("0", "Nothing"), ("abc", "Typo"), ("100", "  ")])
def test_manual_adjustment_validation(service, principal_user, amount, reason):
    with pytest.raises(ValidationError):
        service.add_manual_adjustment(
            principal=principal_user, staff_id="t-1", month="2024-09", amount=amount, reason=reason
        )


def test_manual_adjustment_on_paid_month_conflicts(service, principal_user):
    record = _by_staff(service.build_monthly_payroll(principal=principal_user, branch_id="br-1", month="2024-09"))["t-1"]
    service.pay_record(principal=principal_user, record_id=record.record_id)

    with pytest.raises(FrozenRecordConflict):
        service.add_manual_adjustment(
            principal=principal_user, staff_id="t-1", month="2024-09", amount="-500", reason="Advance"
        )


def test_principal_cannot_touch_other_branch_staff(service, principal_user):
    with pytest.raises(AuthorizationError):
        service.recalculate_staff(principal=principal_user, staff_id="t-9", month="2024-09")


def test_admin_builds_payroll_for_any_branch(service):
    admin = Principal(user_id="admin-1", role=Role.ADMIN, branch_id=None)

    records = service.build_monthly_payroll(principal=admin, branch_id="br-2", month="2024-09")

    assert [r.staff_id for r in records] == ["t-9"]
