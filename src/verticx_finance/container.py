from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .academics.mysql_academics_repository import MySQLAcademicsRepository
from .academics.repository import AcademicsRepository
from .core.constants import FEE_DUE_DAY, SALARY_DIVISOR_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .fees.mysql_fee_repository import MySQLFeeRepository
from .fees.repository import FeeRepository
from .fees.service import FeeService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.repository import PayrollRepository
from .payroll.service import PayrollService
from .promotion.mysql_promotion_repository import MySQLPromotionRepository
from .promotion.repository import PromotionRepository
from .promotion.service import PromotionService
from .staff.mysql_staff_repository import MySQLStaffRepository
from .staff.repository import StaffRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    academics_repo: AcademicsRepository
    fees_repo: FeeRepository
    leaves_repo: LeaveRepository
    staff_repo: StaffRepository
    payroll_repo: PayrollRepository
    promotions_repo: PromotionRepository

    fee_service: FeeService
    leave_service: LeaveService
    payroll_service: PayrollService
    promotion_service: PromotionService


def wire(
    *,
    academics_repo: AcademicsRepository,
    fees_repo: FeeRepository,
    leaves_repo: LeaveRepository,
    staff_repo: StaffRepository,
    payroll_repo: PayrollRepository,
    promotions_repo: PromotionRepository,
    conn: Optional[DatabaseConnection] = None,
    salary_divisor_days: int = SALARY_DIVISOR_DAYS,
    fee_due_day: int = FEE_DUE_DAY,
) -> Container:
    fee_service = FeeService(fees_repo, academics_repo, due_day=fee_due_day)
    leave_service = LeaveService(leaves_repo)
    payroll_service = PayrollService(
        payroll_repo,
        staff_repo,
        leaves_repo,
        calculator=StandardPayrollCalculator(divisor_days=salary_divisor_days),
    )
    promotion_service = PromotionService(academics_repo, fees_repo, promotions_repo, due_day=fee_due_day)

    return Container(
        conn=conn,
        academics_repo=academics_repo,
        fees_repo=fees_repo,
        leaves_repo=leaves_repo,
        staff_repo=staff_repo,
        payroll_repo=payroll_repo,
        promotions_repo=promotions_repo,
        fee_service=fee_service,
        leave_service=leave_service,
        payroll_service=payroll_service,
        promotion_service=promotion_service,
    )


def build_container(
    *,
    db_config: dict,
    salary_divisor_days: int = SALARY_DIVISOR_DAYS,
    fee_due_day: int = FEE_DUE_DAY,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire(
        conn=conn,
        academics_repo=MySQLAcademicsRepository(conn),
        fees_repo=MySQLFeeRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        staff_repo=MySQLStaffRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
        promotions_repo=MySQLPromotionRepository(conn),
        salary_divisor_days=salary_divisor_days,
        fee_due_day=fee_due_day,
    )
