"""
Tests for the intake wizard, driven against the real app through
httpx.ASGITransport.
"""
import asyncio
import unittest

import httpx

from client.api import LoanApiClient
from client.wizard import IntakeWizard, WizardState
from errors import NotFound, StoreUnavailable, ValidationError, WizardStateError
from main import app
from schemas.application import ApprovalRequest
from services.review import ReviewService
from support import TempDatabase


async def _first_snapshot(wizard, timeout=2.0):
    """Wait for the poller's immediate tick so it cannot land after a later one."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while wizard.snapshot is None:
        if loop.time() > deadline:
            raise AssertionError("no status snapshot received")
        await asyncio.sleep(0.005)


def _fill(wizard, **overrides):
    fields = {"full_name": "Maria Souza", "cpf": "123.456.789-09", "email": "maria@example.com"}
    fields.update(overrides)
    wizard.update(**fields)


class TestWizardSteps(unittest.IsolatedAsyncioTestCase):
    """State transitions that never reach the network."""

    def setUp(self):
        self.api = LoanApiClient(http=httpx.AsyncClient(base_url="http://unused"))

    async def asyncTearDown(self):
        await self.api.http.aclose()

    def test_invalid_loan_type_aborts(self):
        """Unknown loan type aborts before collecting and refuses edits."""
        for loan_type in ("mortgage", "", None, "PERSONAL"):
            wizard = IntakeWizard(loan_type, self.api)
            self.assertEqual(wizard.state, WizardState.INVALID_TYPE)
            with self.assertRaises(WizardStateError):
                wizard.update(full_name="x")
            with self.assertRaises(WizardStateError):
                wizard.advance()

    def test_valid_loan_type_starts_collecting(self):
        """Known loan type starts in collecting with its catalogue entry."""
        wizard = IntakeWizard("fgts", self.api)
        self.assertEqual(wizard.state, WizardState.COLLECTING)
        self.assertEqual(wizard.loan_type_info.title, "Empréstimo FGTS")

    def test_email_without_at_does_not_advance(self):
        """Email without "@" keeps the wizard in collecting."""
        wizard = IntakeWizard("personal", self.api)
        _fill(wizard, email="not-an-email")
        with self.assertRaises(ValidationError):
            wizard.advance()
        self.assertEqual(wizard.state, WizardState.COLLECTING)
        self.assertIn("email", wizard.last_error)

    def test_blank_fields_do_not_advance(self):
        """Whitespace-only name keeps the wizard in collecting."""
        wizard = IntakeWizard("personal", self.api)
        _fill(wizard, full_name="   ")
        with self.assertRaises(ValidationError):
            wizard.advance()
        self.assertEqual(wizard.state, WizardState.COLLECTING)

    def test_unknown_draft_field(self):
        """Fields outside the draft are rejected."""
        wizard = IntakeWizard("personal", self.api)
        with self.assertRaises(ValidationError):
            wizard.update(phone="123")

    def test_back_preserves_draft(self):
        """Going back from confirming keeps the entered data."""
        wizard = IntakeWizard("clt", self.api)
        _fill(wizard)
        wizard.advance()
        self.assertEqual(wizard.state, WizardState.CONFIRMING)
        wizard.back()
        self.assertEqual(wizard.state, WizardState.COLLECTING)
        self.assertEqual(wizard.draft["email"], "maria@example.com")

    async def test_submit_requires_confirming(self):
        """Submitting straight from collecting is refused."""
        wizard = IntakeWizard("clt", self.api)
        with self.assertRaises(WizardStateError):
            await wizard.submit()


class TestWizardSubmission(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.db = TempDatabase()
        self.db.install(app)

    async def asyncSetUp(self):
        self.http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
        self.api = LoanApiClient(http=self.http)

    async def asyncTearDown(self):
        await self.http.aclose()
        await self.db.engine.dispose()

    def tearDown(self):
        self.db.uninstall(app)
        self.db.close()

    async def _confirmed_wizard(self, api=None):
        wizard = IntakeWizard("personal", api or self.api, poll_interval=60)
        _fill(wizard)
        wizard.advance()
        return wizard

    async def test_submit_then_observe_approval(self):
        """Submit, then the poller picks up the admin's approval."""
        async with await self._confirmed_wizard() as wizard:
            receipt = await wizard.submit()
            self.assertEqual(wizard.state, WizardState.SUBMITTED)
            self.assertTrue(wizard.poller.running)

            await _first_snapshot(wizard)
            self.assertEqual(wizard.snapshot.status, "pending")
            self.assertIsNone(wizard.outcome)

            async with self.db.sessionmaker() as session:
                await ReviewService(session).approve(receipt.id, ApprovalRequest(approved_amount=15000.5, address="Rua X"))

            await wizard.poller.tick()
            self.assertEqual(wizard.outcome, "approved")
            self.assertEqual(wizard.snapshot.approved_amount, 15000.5)
            self.assertEqual(wizard.snapshot.address, "Rua X")
        self.assertFalse(wizard.poller.running)

    async def test_submit_then_observe_rejection(self):
        """Submit, then the poller picks up the admin's rejection."""
        async with await self._confirmed_wizard() as wizard:
            receipt = await wizard.submit()
            await _first_snapshot(wizard)
            async with self.db.sessionmaker() as session:
                await ReviewService(session).reject(receipt.id)
            await wizard.poller.tick()
            self.assertEqual(wizard.outcome, "rejected")
            self.assertIsNone(wizard.snapshot.approved_amount)

    async def test_server_error_keeps_wizard_confirming(self):
        """A 500 from the API leaves the wizard in confirming with the error."""
        def handler(request):
            return httpx.Response(500, json={"error": "Failed to submit application"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test") as http:
            wizard = await self._confirmed_wizard(LoanApiClient(http=http))
            with self.assertRaises(StoreUnavailable):
                await wizard.submit()
        self.assertEqual(wizard.state, WizardState.CONFIRMING)
        self.assertEqual(wizard.last_error, "Failed to submit application")
        self.assertIsNone(wizard.poller)

    async def test_unreachable_api_keeps_wizard_confirming(self):
        """A connection error leaves the wizard in confirming."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test") as http:
            wizard = await self._confirmed_wizard(LoanApiClient(http=http))
            with self.assertRaises(StoreUnavailable):
                await wizard.submit()
        self.assertEqual(wizard.state, WizardState.CONFIRMING)
        self.assertIsNotNone(wizard.last_error)

    async def test_client_maps_gateway_errors(self):
        """Gateway 404 and 400 come back as NotFound and ValidationError."""
        with self.assertRaises(NotFound):
            await self.api.check_status("app-000000000000", "nope")
        with self.assertRaises(ValidationError):
            await self.api.check_status("", "nope")


if __name__ == "__main__":
    unittest.main()
