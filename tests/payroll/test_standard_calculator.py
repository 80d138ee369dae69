from datetime import date, datetime
from decimal import Decimal

from verticx_finance.core.enums import LeaveStatus, PayrollStatus
from verticx_finance.leaves.model import LeaveApplication
from verticx_finance.payroll.calculator.standard_calculator import StandardPayrollCalculator
from verticx_finance.payroll.model import ManualSalaryAdjustment


def _leave(start, end, *, status=LeaveStatus.APPROVED, half_day=False, leave_id="lv-1"):
    return LeaveApplication(
        leave_id=leave_id,
        applicant_id="t-1",
        branch_id="br-1",
        leave_type="Unpaid",
        start_date=start,
        end_date=end,
        reason="Family",
        status=status,
        is_half_day=half_day,
    )


def _adjustment(amount):
    return ManualSalaryAdjustment(
        adjustment_id="adj-1",
        branch_id="br-1",
        staff_id="t-1",
        month="2024-09",
        amount=Decimal(amount),
        reason="Bonus",
        adjusted_by="prin-1",
        adjusted_at=datetime(2024, 9, 20, 12, 0),
    )


def test_two_day_leave_deducts_two_thirtieths():
    calc = StandardPayrollCalculator()

    figures = calc.settle(
        base_salary=Decimal("30000"),
        year=2024,
        month=9,
        leaves=[_leave(date(2024, 9, 10), date(2024, 9, 11))],
        adjustments=[],
    )

    assert figures.status == PayrollStatus.PENDING
    assert figures.unpaid_leave_days == Decimal("2")
    assert figures.leave_deductions == Decimal("2000")
    assert figures.net_payable == Decimal("28000")


def test_half_day_counts_half():
    calc = StandardPayrollCalculator()

    days = calc.unpaid_leave_days([_leave(date(2024, 9, 3), date(2024, 9, 3), half_day=True)], year=2024, month=9)

    assert days == Decimal("0.5")


def test_leave_spanning_months_counts_only_days_inside_month():
    calc = StandardPayrollCalculator()
    leave = _leave(date(2024, 8, 29), date(2024, 9, 2))

    assert calc.unpaid_leave_days([leave], year=2024, month=9) == Decimal("2")
    assert calc.unpaid_leave_days([leave], year=2024, month=8) == Decimal("3")


def test_pending_and_rejected_leaves_are_ignored():
    calc = StandardPayrollCalculator()
    leaves = [
        _leave(date(2024, 9, 3), date(2024, 9, 5), status=LeaveStatus.PENDING),
        _leave(date(2024, 9, 9), date(2024, 9, 9), status=LeaveStatus.REJECTED, leave_id="lv-2"),
    ]

    assert calc.unpaid_leave_days(leaves, year=2024, month=9) == Decimal("0")


def test_overlapping_leaves_are_clamped_to_month_length():
    calc = StandardPayrollCalculator()
    leaves = [
        _leave(date(2024, 2, 1), date(2024, 2, 29)),
        _leave(date(2024, 2, 10), date(2024, 2, 20), leave_id="lv-2"),
    ]

    assert calc.unpaid_leave_days(leaves, year=2024, month=2) == Decimal("29")


def test_salary_not_set_yields_null_figures():
    figures = StandardPayrollCalculator().settle(
        base_salary=None, year=2024, month=9, leaves=[_leave(date(2024, 9, 1), date(2024, 9, 1))], adjustments=[]
    )

    assert figures.status == PayrollStatus.SALARY_NOT_SET
    assert figures.base_salary is None
    assert figures.leave_deductions is None
    assert figures.net_payable is None


def test_manual_adjustments_are_added_and_net_is_rounded_half_up():
    figures = StandardPayrollCalculator().settle(
        base_salary=Decimal("25000"),
        year=2024,
        month=9,
        leaves=[_leave(date(2024, 9, 3), date(2024, 9, 3), half_day=True)],
        adjustments=[_adjustment("1500"), _adjustment("-200")],
    )

    # 0.5 x 25000 / 30 = 416.666...
    assert figures.leave_deductions == Decimal("417")
    assert figures.manual_adjustments_total == Decimal("1300")
    assert figures.net_payable == Decimal("25883")
