class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when request input is malformed before it reaches validation."""


class ConfigurationError(DomainError):
    """Raised when mess settings cannot be turned into a usable policy."""


class DuplicateAttendanceError(DomainError):
    """Raised by storage when a second valid scan hits the uniqueness constraint."""


class InfrastructureError(Exception):
    """Retryable fault: the scan could not be judged either way."""


class StorageUnavailableError(InfrastructureError):
    """Raised when the attendance store cannot be read or written."""


class QRVerificationUnavailable(InfrastructureError):
    """Raised when a QR verification backend fails with an I/O error."""
