from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class StaffMember:
    """Payroll-relevant view of a staff user.

    ``salary`` is None until the principal sets it.
    """

    staff_id: str
    branch_id: str
    name: str
    role: Role
    salary: Optional[Decimal]
