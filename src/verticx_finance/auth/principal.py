from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError

FINANCE_ROLES = frozenset({Role.ADMIN, Role.PRINCIPAL, Role.REGISTRAR})
PAYROLL_ROLES = frozenset({Role.ADMIN, Role.PRINCIPAL})
STAFF_ROLES = frozenset({Role.PRINCIPAL, Role.REGISTRAR, Role.TEACHER, Role.LIBRARIAN})


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, validated once at the boundary.

    Token issuance lives outside this package; the principal only carries the
    identity the gateway already verified.
    """

    user_id: str
    role: Role
    branch_id: Optional[str] = None

    def require(self, *roles: Role) -> None:
        if self.role not in roles:
            raise AuthorizationError(f"Role {self.role.value} is not allowed to perform this action")

    def require_branch(self, branch_id: Optional[str]) -> None:
        # Admins operate across branches.
        if self.role == Role.ADMIN:
            return
        if not self.branch_id or self.branch_id != branch_id:
            raise AuthorizationError("Access to another branch is not allowed")

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "Principal":
        user_id = (headers.get("X-User-Id") or "").strip()
        raw_role = (headers.get("X-User-Role") or "").strip()
        branch_id = (headers.get("X-Branch-Id") or "").strip() or None
        if not user_id or not raw_role:
            raise AuthorizationError("Missing authenticated principal")
        try:
            role = Role(raw_role)
        except ValueError:
            raise AuthorizationError(f"Unknown role: {raw_role}")
        return cls(user_id=user_id, role=role, branch_id=branch_id)
