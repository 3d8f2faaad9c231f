class ServiceError(Exception):
    """Base class for service-layer errors."""


class ValidationError(ServiceError):
    """Raised when input payload is invalid."""


class ExternalDependencyError(ServiceError):
    """Raised when the persistence layer fails to store an update."""


class UnknownEnrollmentError(ServiceError):
    """Raised when an enrollment id is not loaded in the edit buffer."""


class InactiveEnrollmentError(ServiceError):
    """Raised when editing an enrollment whose situation is INACTIVE."""


class ActivityClosedError(ServiceError):
    """Raised when mutating an activity that has been closed."""


class LossyMigrationError(ServiceError):
    """Raised when a schema change would drop grades and the caller refused it."""

    def __init__(self, message: str, discarded=None):
        super().__init__(message)
        self.discarded = discarded or {}
