class DomainError(Exception):
    """Base exception for the attendance data layer."""


class ValidationError(DomainError):
    """Raised when a query parameter (year, month, page size, ...) is invalid."""


class DecodeError(DomainError):
    """Raised when a stored document does not match the expected schema."""


class StoreError(DomainError):
    """Raised by the document store adapter when the remote call fails."""


class DataUnavailableError(DomainError):
    """Raised when the last (raw) fallback path cannot read the store."""
