"""Applicant-side client: API wrapper, status poller and intake wizard."""
from client.api import LoanApiClient
from client.poller import StatusPoller
from client.wizard import IntakeWizard, WizardState

__all__ = [
    "LoanApiClient",
    "StatusPoller",
    "IntakeWizard",
    "WizardState",
]
