# siteledger/exceptions.py

class DomainError(Exception):
    """Base class for ledger and statement errors."""
    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when a caller passes arguments that break the contract (bad range, unknown report kind)."""


class NotFoundError(DomainError):
    """Raised when a worker or project is not known to the source."""


class BusinessRuleError(DomainError):
    """Raised when an operation is refused, e.g. a second export of the same report."""


class ExportError(DomainError):
    """Raised when a report cannot be rendered or written."""
