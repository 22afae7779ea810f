from __future__ import annotations

import logging
import secrets
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from errors import StoreUnavailable
from models import LoanApplication
from services.change_feed import ChangeFeed, change_feed

logger = logging.getLogger(__name__)


def new_application_id() -> str:
    return f"app-{uuid.uuid4().hex[:12]}"


def new_client_token() -> str:
    return secrets.token_urlsafe(32)


class ApplicationStore:
    """
    Point reads and writes on the loan_applications table.

    Mutations commit immediately and then publish to the change feed, so a
    subscriber that refetches on an event always sees the new row.
    Any SQLAlchemy failure surfaces as StoreUnavailable.
    """

    def __init__(self, session: AsyncSession, feed: Optional[ChangeFeed] = None):
        self.session = session
        self.feed = feed if feed is not None else change_feed

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Commit failed: %s", e)
            raise StoreUnavailable("Failed to write application") from e

    async def insert(self, *, full_name: str, cpf: str, email: str, loan_type: str) -> LoanApplication:
        now = datetime.now(timezone.utc)
        app = LoanApplication(
            id=new_application_id(),
            client_token=new_client_token(),
            full_name=full_name,
            cpf=cpf,
            email=email,
            loan_type=loan_type,
            status="pending",
            created_at=now,
            updated_at=now,
        )
        try:
            self.session.add(app)
            await self.session.flush()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Insert failed: %s", e)
            raise StoreUnavailable("Failed to write application") from e
        await self._commit()
        logger.info("Created application %s (type=%s)", app.id, loan_type)
        self.feed.publish("insert", app.id, app.status)
        return app

    async def get(self, application_id: str) -> Optional[LoanApplication]:
        try:
            result = await self.session.execute(
                select(LoanApplication)
                .where(LoanApplication.id == application_id)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as e:
            logger.error("Read of %s failed: %s", application_id, e)
            raise StoreUnavailable("Failed to fetch application") from e
        return result.scalar_one_or_none()

    async def list_all(self) -> list[LoanApplication]:
        try:
            result = await self.session.execute(
                select(LoanApplication).order_by(LoanApplication.created_at.desc(), LoanApplication.id.desc())
            )
        except SQLAlchemyError as e:
            logger.error("Listing applications failed: %s", e)
            raise StoreUnavailable("Failed to list applications") from e
        return list(result.scalars().all())

    async def count_by_status(self) -> dict[str, int]:
        try:
            result = await self.session.execute(
                select(LoanApplication.status, func.count()).group_by(LoanApplication.status)
            )
        except SQLAlchemyError as e:
            logger.error("Counting applications failed: %s", e)
            raise StoreUnavailable("Failed to count applications") from e
        return {status: count for status, count in result.all()}

    async def transition(
        self,
        application_id: str,
        *,
        from_status: str,
        to_status: str,
        values: Optional[dict[str, Any]] = None,
    ) -> bool:
        """
        Conditional update: only applies when the row is still in from_status.
        Returns False when no row matched (missing id or status already moved).
        """
        stmt = (
            update(LoanApplication)
            .where(LoanApplication.id == application_id, LoanApplication.status == from_status)
            .values(status=to_status, updated_at=datetime.now(timezone.utc), **(values or {}))
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Update of %s failed: %s", application_id, e)
            raise StoreUnavailable("Failed to update application") from e
        if result.rowcount != 1:
            return False
        await self._commit()
        self.feed.publish("update", application_id, to_status)
        return True

    async def delete(self, application_id: str) -> bool:
        try:
            result = await self.session.execute(
                delete(LoanApplication)
                .where(LoanApplication.id == application_id)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Delete of %s failed: %s", application_id, e)
            raise StoreUnavailable("Failed to delete application") from e
        if result.rowcount != 1:
            return False
        await self._commit()
        self.feed.publish("delete", application_id)
        return True
