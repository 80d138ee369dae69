from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import pytest

from verticx_finance.academics.model import (
    AcademicSession,
    ArchivedStudentRecord,
    AttendanceEntry,
    GradeEntry,
    SchoolClass,
    Student,
)
from verticx_finance.auth.principal import STAFF_ROLES, Principal
from verticx_finance.core.enums import LeaveStatus, PayrollStatus, Role
from verticx_finance.fees.model import FeeAdjustment, FeePayment, FeeRecord, FeeTemplate, MonthlyFee
from verticx_finance.leaves.model import LeaveApplication
from verticx_finance.payroll.model import ManualSalaryAdjustment, PayrollRecord
from verticx_finance.staff.model import StaffMember


class InMemoryAcademics:
    def __init__(self):
        self.sessions: dict[str, AcademicSession] = {}
        self.classes: dict[str, SchoolClass] = {}
        self.students: dict[str, Student] = {}
        self.grades: list[GradeEntry] = []
        self.attendance: list[AttendanceEntry] = []

    def add_class(self, school_class: SchoolClass) -> SchoolClass:
        self.classes[school_class.class_id] = school_class
        return school_class

    def add_student(self, student: Student) -> Student:
        self.students[student.student_id] = student
        if student.class_id and student.class_id in self.classes:
            c = self.classes[student.class_id]
            if student.student_id not in c.student_ids:
                self.classes[c.class_id] = replace(c, student_ids=c.student_ids + (student.student_id,))
        return student

    def get_session(self, branch_id):
        return self.sessions.get(branch_id)

    def set_session_start(self, branch_id, start_date):
        self.sessions[branch_id] = AcademicSession(branch_id=branch_id, start_date=start_date)
        return True

    def get_class(self, class_id):
        return self.classes.get(class_id)

    def get_student(self, student_id):
        return self.students.get(student_id)

    def list_students(self, branch_id):
        return [s for s in self.students.values() if s.branch_id == branch_id]

    def list_live_grades(self, student_id):
        return [g for g in self.grades if g.student_id == student_id and g.archived_session is None]

    def list_live_attendance(self, student_id):
        return [a for a in self.attendance if a.student_id == student_id and a.archived_session is None]

    def move_student(self, *, student_id, target_class):
        student = self.students.get(student_id)
        if not student:
            return False
        if student.class_id and student.class_id in self.classes:
            old = self.classes[student.class_id]
            self.classes[old.class_id] = replace(
                old, student_ids=tuple(i for i in old.student_ids if i != student_id)
            )
        target = self.classes[target_class.class_id]
        if student_id not in target.student_ids:
            self.classes[target.class_id] = replace(target, student_ids=target.student_ids + (student_id,))
        self.students[student_id] = replace(
            student, class_id=target_class.class_id, grade_level=target_class.grade_level
        )
        return True


class InMemoryFees:
    def __init__(self):
        self.templates: dict[str, FeeTemplate] = {}
        self.records: dict[str, FeeRecord] = {}
        self.payments: list[FeePayment] = []
        self.adjustments: list[FeeAdjustment] = []

    def get_template(self, template_id):
        return self.templates.get(template_id)

    def get_record(self, student_id):
        return self.records.get(student_id)

    def list_records(self, student_ids):
        return {i: self.records[i] for i in student_ids if i in self.records}

    def record_payment(self, *, student_id, amount, paid_date, transaction_id, details=None):
        record = self.records.get(student_id)
        if not record or amount > record.outstanding:
            return None
        payment = FeePayment(
            payment_id=f"pay-{len(self.payments) + 1}",
            student_id=student_id,
            amount=amount,
            paid_date=paid_date,
            transaction_id=transaction_id,
            details=details,
        )
        self.payments.append(payment)
        self.records[student_id] = replace(record, paid_amount=record.paid_amount + amount)
        return payment

    def add_adjustment(self, *, student_id, amount, adjustment_type, reason, adjusted_by, adjusted_on):
        adjustment = FeeAdjustment(
            adjustment_id=f"adj-{len(self.adjustments) + 1}",
            student_id=student_id,
            amount=amount,
            adjustment_type=adjustment_type,
            reason=reason,
            adjusted_by=adjusted_by,
            adjusted_on=adjusted_on,
        )
        self.adjustments.append(adjustment)
        record = self.records.get(student_id)
        if record:
            self.records[student_id] = replace(record, total_amount=max(record.paid_amount, record.total_amount + amount))
        return adjustment

    def list_payments(self, student_id):
        return [p for p in self.payments if p.student_id == student_id]

    def list_adjustments(self, student_id):
        return [a for a in self.adjustments if a.student_id == student_id]


class InMemoryLeaves:
    def __init__(self):
        self.leaves: dict[str, LeaveApplication] = {}

    def add(self, leave: LeaveApplication) -> LeaveApplication:
        self.leaves[leave.leave_id] = leave
        return leave

    def create_leave(self, *, applicant_id, branch_id, leave_type, start_date, end_date, reason, is_half_day):
        leave_id = f"leave-{len(self.leaves) + 1}"
        self.leaves[leave_id] = LeaveApplication(
            leave_id=leave_id,
            applicant_id=applicant_id,
            branch_id=branch_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=LeaveStatus.PENDING,
            is_half_day=is_half_day,
            created_at=datetime(2024, 9, 1, 9, 0),
        )
        return leave_id

    def get_leave(self, leave_id):
        return self.leaves.get(leave_id)

    def list_leaves(self, *, branch_id=None, status=None, applicant_id=None, limit=200):
        out = [
            l
            for l in self.leaves.values()
            if (branch_id is None or l.branch_id == branch_id)
            and (status is None or l.status == status)
            and (applicant_id is None or l.applicant_id == applicant_id)
        ]
        return out[:limit]

    def list_approved_overlapping(self, *, applicant_id, start, end):
        return [
            l
            for l in self.leaves.values()
            if l.applicant_id == applicant_id
            and l.status == LeaveStatus.APPROVED
            and l.start_date <= end
            and l.end_date >= start
        ]

    def decide_leave(self, *, leave_id, status, decided_by, reviewer_note=None):
        leave = self.leaves.get(leave_id)
        if not leave or leave.status != LeaveStatus.PENDING:
            return False
        self.leaves[leave_id] = replace(
            leave,
            status=status,
            decided_by=decided_by,
            decided_at=datetime(2024, 9, 2, 10, 0),
            reviewer_note=reviewer_note,
        )
        return True


class InMemoryStaff:
    def __init__(self):
        self.staff: dict[str, StaffMember] = {}

    def add(self, member: StaffMember) -> StaffMember:
        self.staff[member.staff_id] = member
        return member

    def get_by_id(self, staff_id):
        return self.staff.get(staff_id)

    def list_payroll_staff(self, branch_id, *, exclude_staff_id=None):
        return [
            s
            for s in self.staff.values()
            if s.branch_id == branch_id and s.role in STAFF_ROLES and s.staff_id != exclude_staff_id
        ]


class InMemoryPayroll:
    def __init__(self):
        self.records: dict[str, PayrollRecord] = {}
        self.adjustments: list[ManualSalaryAdjustment] = []
        self.saves = 0

    def get_record(self, *, staff_id, month):
        return next((r for r in self.records.values() if r.staff_id == staff_id and r.month == month), None)

    def get_by_id(self, record_id):
        return self.records.get(record_id)

    def list_for_month(self, *, branch_id, month):
        return [r for r in self.records.values() if r.branch_id == branch_id and r.month == month]

    def save_unless_paid(self, record):
        existing = self.get_record(staff_id=record.staff_id, month=record.month)
        if existing and existing.status == PayrollStatus.PAID:
            return existing
        self.saves += 1
        if existing:
            record = replace(record, record_id=existing.record_id)
        self.records[record.record_id] = record
        return record

    def mark_paid(self, *, record_id, paid_by, paid_at):
        record = self.records.get(record_id)
        if not record or record.status != PayrollStatus.PENDING:
            return False
        self.records[record_id] = replace(record, status=PayrollStatus.PAID, paid_by=paid_by, paid_at=paid_at)
        return True

    def add_manual_adjustment(self, *, branch_id, staff_id, month, amount, reason, adjusted_by, adjusted_at):
        adjustment = ManualSalaryAdjustment(
            adjustment_id=f"sal-adj-{len(self.adjustments) + 1}",
            branch_id=branch_id,
            staff_id=staff_id,
            month=month,
            amount=amount,
            reason=reason,
            adjusted_by=adjusted_by,
            adjusted_at=adjusted_at,
        )
        self.adjustments.append(adjustment)
        return adjustment

    def list_manual_adjustments(self, *, staff_id, month):
        return [a for a in self.adjustments if a.staff_id == staff_id and a.month == month]


class InMemoryPromotions:
    def __init__(self, academics: InMemoryAcademics, fees: InMemoryFees):
        self._academics = academics
        self._fees = fees
        self.archives: list[ArchivedStudentRecord] = []

    def apply_promotion(self, *, student_id, target_class, archive, settle):
        settlement = settle(self._fees.records.get(student_id))
        self.archives.append(archive)
        self._academics.grades = [
            replace(g, archived_session=archive.academic_session)
            if g.student_id == student_id and g.archived_session is None
            else g
            for g in self._academics.grades
        ]
        self._academics.attendance = [
            replace(a, archived_session=archive.academic_session)
            if a.student_id == student_id and a.archived_session is None
            else a
            for a in self._academics.attendance
        ]
        if settlement.new_fee_record is not None:
            self._fees.records[student_id] = settlement.new_fee_record
        self._academics.move_student(student_id=student_id, target_class=target_class)
        return settlement

    def list_archives(self, student_id):
        return [a for a in self.archives if a.student_id == student_id]


def monthly_template(
    template_id: str,
    per_month: dict[str, int],
    *,
    branch_id: str = "br-1",
    amount: Optional[int] = None,
) -> FeeTemplate:
    return FeeTemplate(
        template_id=template_id,
        branch_id=branch_id,
        name=f"Template {template_id}",
        grade_level=5,
        amount=Decimal(amount if amount is not None else sum(per_month.values())),
        monthly_breakdown=tuple(MonthlyFee(month=m, total=Decimal(v)) for m, v in per_month.items()),
    )


@pytest.fixture
def academics() -> InMemoryAcademics:
    repo = InMemoryAcademics()
    repo.sessions["br-1"] = AcademicSession(branch_id="br-1", start_date=date(2024, 4, 1))
    return repo


@pytest.fixture
def fees() -> InMemoryFees:
    return InMemoryFees()


@pytest.fixture
def leaves() -> InMemoryLeaves:
    return InMemoryLeaves()


@pytest.fixture
def staff() -> InMemoryStaff:
    return InMemoryStaff()


@pytest.fixture
def payroll() -> InMemoryPayroll:
    return InMemoryPayroll()


@pytest.fixture
def promotions(academics, fees) -> InMemoryPromotions:
    return InMemoryPromotions(academics, fees)


@pytest.fixture
def registrar() -> Principal:
    return Principal(user_id="reg-1", role=Role.REGISTRAR, branch_id="br-1")


@pytest.fixture
def principal_user() -> Principal:
    return Principal(user_id="prin-1", role=Role.PRINCIPAL, branch_id="br-1")


@pytest.fixture
def teacher() -> Principal:
    return Principal(user_id="t-1", role=Role.TEACHER, branch_id="br-1")


@pytest.fixture
def template_factory():
    return monthly_template
