"""
Error taxonomy for the scheduling core.

Every error carries the HTTP status the API answers with; ``main.py``
maps them in a single exception handler.
"""
from fastapi import status


class SchedulerError(Exception):
    """Base class for expected, caller-visible scheduling failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = None):
        self.message = message or self.__class__.__doc__
        super().__init__(self.message)


class ValidationError(SchedulerError):
    """Malformed request arguments."""

    status_code = status.HTTP_400_BAD_REQUEST


class NoAvailabilityError(SchedulerError):
    """No caregiver is available on the requested date."""

    status_code = status.HTTP_409_CONFLICT


class UnknownVaccineError(SchedulerError):
    """The vaccine is not present in the dose ledger."""

    status_code = status.HTTP_404_NOT_FOUND


class InsufficientDosesError(SchedulerError):
    """No doses of the vaccine remain."""

    status_code = status.HTTP_409_CONFLICT


class StorageError(SchedulerError):
    """The storage transaction failed."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class DuplicateUsernameError(SchedulerError):
    """Username taken, try again."""

    status_code = status.HTTP_400_BAD_REQUEST
