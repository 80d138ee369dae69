from __future__ import annotations

import io
from typing import Sequence

import pandas as pd

from .model import PayrollRecord

SHEET_COLUMNS = [
    "Staff",
    "Role",
    "Month",
    "Base salary",
    "Unpaid leave days",
    "Leave deductions",
    "Manual adjustments",
    "Net payable",
    "Status",
    "Paid at",
]


def payroll_sheet(records: Sequence[PayrollRecord]) -> pd.DataFrame:
    rows = [
        [
            r.staff_name,
            r.staff_role.value,
            r.month,
            float(r.base_salary) if r.base_salary is not None else None,
            float(r.unpaid_leave_days),
            float(r.leave_deductions) if r.leave_deductions is not None else None,
            float(r.manual_adjustments_total),
            float(r.net_payable) if r.net_payable is not None else None,
            r.status.value,
            r.paid_at.strftime("%Y-%m-%d %H:%M") if r.paid_at else "",
        ]
        for r in records
    ]
    return pd.DataFrame(rows, columns=SHEET_COLUMNS)


def payroll_workbook(records: Sequence[PayrollRecord]) -> bytes:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        payroll_sheet(records).to_excel(writer, index=False, sheet_name="Payroll")
    return output.getvalue()
