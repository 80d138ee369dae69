from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Portal roles used for capability checks."""

    ADMIN = "Admin"
    PRINCIPAL = "Principal"
    REGISTRAR = "Registrar"
    TEACHER = "Teacher"
    STUDENT = "Student"
    PARENT = "Parent"
    LIBRARIAN = "Librarian"


class LeaveStatus(str, Enum):
    """Review state of a leave application."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class PayrollStatus(str, Enum):
    SALARY_NOT_SET = "Salary Not Set"
    PENDING = "Pending"
    PAID = "Paid"


class MonthlyDueStatus(str, Enum):
    PAID = "Paid"
    PARTIALLY_PAID = "Partially Paid"
    DUE = "Due"


class FeeAdjustmentType(str, Enum):
    CONCESSION = "concession"
    CHARGE = "charge"
