"""Intake error taxonomy"""

from typing import Any, Optional


class IntakeError(Exception):
    """Base class for intake workflow errors."""


class ValidationError(IntakeError):
    """A required field is missing or malformed. Recovered locally, never sent to the network."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class DuplicateCustomerError(IntakeError):
    """A customer with the same email/phone already exists; the operator must choose."""

    def __init__(self, existing: Any):
        super().__init__("A customer with this email/phone already exists")
        self.existing = existing


class NetworkError(IntakeError):
    """A call to the FineTune API failed. The draft is kept so the user can retry."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class QuotaExceededError(IntakeError):
    """The shop's daily submission quota is exhausted. Terminal for the session."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Daily work order limit reached")
        self.message = message or "Daily work order limit reached"


class AgreementWorkflowError(IntakeError):
    """The follow-up sign-agreement call failed after the work order was created."""


class InvalidTransitionError(IntakeError):
    """A wizard event is not allowed from the current step."""


class SubmissionInProgressError(IntakeError):
    """A work order submission is already in flight."""


class AlreadySubmittedError(IntakeError):
    """The work order was already created; resubmission is disabled."""


class SessionNotFoundError(IntakeError):
    """The wizard session does not exist or has expired."""
