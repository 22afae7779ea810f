"""
Three-step intake wizard: collect the applicant's data, confirm it, submit
and then watch the application's status.

    collecting -> confirming -> submitted (polling)
         ^            |
         +-- back ----+

An unknown loan type puts the wizard straight into ``invalid_type``; it never
reaches ``collecting`` and every further operation is refused.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from client.api import LoanApiClient
from client.poller import StatusPoller
from errors import StoreUnavailable, ValidationError, WizardStateError
from schemas.application import (
    LOAN_TYPES,
    ApplicationReceipt,
    ApplicationStatusView,
    LoanTypeInfo,
    draft_problems,
    is_valid_loan_type,
)

logger = logging.getLogger(__name__)

DRAFT_FIELDS = ("full_name", "cpf", "email")


class WizardState(str, Enum):
    INVALID_TYPE = "invalid_type"
    COLLECTING = "collecting"
    CONFIRMING = "confirming"
    SUBMITTED = "submitted"


class IntakeWizard:
    def __init__(self, loan_type: Optional[str], api: LoanApiClient, poll_interval: Optional[float] = None):
        self.api = api
        self.poll_interval = poll_interval
        self.loan_type = loan_type
        self.loan_type_info: Optional[LoanTypeInfo] = LOAN_TYPES[loan_type] if is_valid_loan_type(loan_type) else None
        self.state = WizardState.COLLECTING if self.loan_type_info else WizardState.INVALID_TYPE
        self.draft: dict[str, str] = {name: "" for name in DRAFT_FIELDS}
        self.receipt: Optional[ApplicationReceipt] = None
        self.snapshot: Optional[ApplicationStatusView] = None
        self.last_error: Optional[str] = None
        self.poller: Optional[StatusPoller] = None
        self._submitting = False
        if self.state is WizardState.INVALID_TYPE:
            logger.info("Intake aborted: invalid loan type %r", loan_type)

    def _require(self, state: WizardState, action: str) -> None:
        if self.state is not state:
            raise WizardStateError(f"Cannot {action} while {self.state.value}")

    # Step 1

    def update(self, **fields: str) -> None:
        self._require(WizardState.COLLECTING, "edit the draft")
        unknown = set(fields) - set(DRAFT_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
        for name, value in fields.items():
            self.draft[name] = value or ""

    def problems(self) -> list[str]:
        return draft_problems(self.draft["full_name"], self.draft["cpf"], self.draft["email"])

    def advance(self) -> None:
        self._require(WizardState.COLLECTING, "continue")
        problems = self.problems()
        if problems:
            self.last_error = "; ".join(problems)
            raise ValidationError(self.last_error)
        self.last_error = None
        self.state = WizardState.CONFIRMING

    # Step 2

    def back(self) -> None:
        self._require(WizardState.CONFIRMING, "go back")
        self.state = WizardState.COLLECTING

    async def submit(self) -> ApplicationReceipt:
        """
        Create the application. On failure the wizard stays in ``confirming``
        with ``last_error`` set; retrying is up to the user.
        """
        self._require(WizardState.CONFIRMING, "submit")
        if self._submitting:
            raise WizardStateError("Submission already in progress")
        self._submitting = True
        try:
            receipt = await self.api.create_application(
                full_name=self.draft["full_name"].strip(),
                cpf=self.draft["cpf"].strip(),
                email=self.draft["email"].strip(),
                loan_type=self.loan_type,
            )
        except (StoreUnavailable, ValidationError) as e:
            self.last_error = e.message or "Failed to submit application"
            logger.warning("Intake submission failed: %s", self.last_error)
            raise
        finally:
            self._submitting = False

        self.last_error = None
        self.receipt = receipt
        self.state = WizardState.SUBMITTED
        logger.info("Intake submitted as %s; polling for status", receipt.id)
        self._start_polling()
        return receipt

    # Step 3

    def _start_polling(self) -> None:
        receipt = self.receipt

        async def fetch() -> ApplicationStatusView:
            return await self.api.check_status(receipt.id, receipt.client_token)

        self.poller = StatusPoller(fetch, interval=self.poll_interval, on_snapshot=self._on_snapshot)
        self.poller.start()

    def _on_snapshot(self, snapshot: ApplicationStatusView) -> None:
        if self.snapshot is None or self.snapshot.status != snapshot.status:
            logger.info("Application %s is %s", snapshot.id, snapshot.status)
        self.snapshot = snapshot

    @property
    def outcome(self) -> Optional[str]:
        """``approved`` or ``rejected`` once observed, otherwise None."""
        if self.snapshot is not None and self.snapshot.is_terminal:
            return self.snapshot.status
        return None

    async def close(self) -> None:
        if self.poller is not None:
            await self.poller.stop()

    async def __aenter__(self) -> "IntakeWizard":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
