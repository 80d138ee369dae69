class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a principal lacks the capability for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced student, class, staff member or record does not exist."""


class ConfigurationMissing(DomainError):
    """Raised when a fee template or its monthly breakdown is absent.

    Callers degrade to aggregate-only figures instead of failing the request.
    """


class FrozenRecordConflict(DomainError):
    """Raised when a mutation targets a payroll record that is already paid."""
