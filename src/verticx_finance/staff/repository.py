from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import StaffMember


class StaffRepository(Protocol):
    def get_by_id(self, staff_id: str) -> Optional[StaffMember]:
        raise NotImplementedError

    def list_payroll_staff(self, branch_id: str, *, exclude_staff_id: Optional[str] = None) -> Sequence[StaffMember]:
        """Staff of a branch on payroll (principal, registrar, teachers, librarians)."""
        raise NotImplementedError
