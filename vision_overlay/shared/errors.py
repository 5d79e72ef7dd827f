class ApplicationError(Exception):
    """Base error for known application failures."""


class InfrastructureError(ApplicationError):
    """Raised when an infrastructure adapter fails."""


class ContractViolationError(ApplicationError, ValueError):
    """Raised when a caller passes values outside a documented input contract."""


class DetectorUnavailableError(InfrastructureError):
    """Raised when a detector kind has no configured backend."""
