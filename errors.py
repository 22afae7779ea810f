"""
Domain errors shared by the services, the HTTP layer and the client library.

Services raise these; routers translate them to HTTP responses and the client
translates HTTP responses back into them.
"""


class LoanServiceError(Exception):
    """Base class for every error raised by this package."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(LoanServiceError):
    """Caller omitted or malformed a required input."""


class NotFound(LoanServiceError):
    """No record matches. Also used when a client token does not match."""


class StoreUnavailable(LoanServiceError):
    """The record store (or the API in front of it) could not be reached."""


class InvalidTransition(LoanServiceError):
    """Status change requested from a state that does not allow it."""

    def __init__(self, application_id: str, current_status: str, action: str):
        super().__init__(f"Cannot {action} application {application_id}: status is {current_status}")
        self.application_id = application_id
        self.current_status = current_status
        self.action = action


class WizardStateError(LoanServiceError):
    """Intake wizard operation called in a state where it is not allowed."""
