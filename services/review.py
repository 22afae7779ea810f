"""Admin review actions over the application store."""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from errors import InvalidTransition, NotFound
from models import LoanApplication
from schemas.application import TERMINAL_STATUSES, ApplicationStats, ApprovalRequest
from services.store import ApplicationStore

logger = logging.getLogger(__name__)

MSG_NOT_FOUND = "Application not found"


class ReviewService:
    def __init__(self, session: AsyncSession):
        self.store = ApplicationStore(session)

    async def list_applications(self) -> list[LoanApplication]:
        return await self.store.list_all()

    async def get_application(self, application_id: str) -> LoanApplication:
        app = await self.store.get(application_id)
        if app is None:
            raise NotFound(MSG_NOT_FOUND)
        return app

    async def stats(self) -> ApplicationStats:
        counts = await self.store.count_by_status()
        return ApplicationStats(
            total=sum(counts.values()),
            pending=counts.get("pending", 0),
            approved=counts.get("approved", 0),
            rejected=counts.get("rejected", 0),
        )

    async def approve(self, application_id: str, body: ApprovalRequest) -> LoanApplication:
        """Set status, approved amount and KYC fields in one conditional update."""
        values = {"approved_amount": body.approved_amount, **body.kyc_fields()}
        return await self._transition(application_id, "approved", values, action="approve")

    async def reject(self, application_id: str) -> LoanApplication:
        return await self._transition(application_id, "rejected", None, action="reject")

    async def delete(self, application_id: str) -> None:
        app = await self.get_application(application_id)
        if app.status not in TERMINAL_STATUSES:
            raise InvalidTransition(application_id, app.status, "delete")
        if not await self.store.delete(application_id):
            raise NotFound(MSG_NOT_FOUND)
        logger.info("Deleted application %s (was %s)", application_id, app.status)

    async def _transition(self, application_id: str, to_status: str, values, *, action: str) -> LoanApplication:
        applied = await self.store.transition(
            application_id, from_status="pending", to_status=to_status, values=values
        )
        if not applied:
            # Either the id is unknown or another admin got there first
            current = await self.get_application(application_id)
            logger.warning("Refused to %s %s: status is %s", action, application_id, current.status)
            raise InvalidTransition(application_id, current.status, action)
        logger.info("Application %s %s", application_id, to_status)
        return await self.get_application(application_id)
