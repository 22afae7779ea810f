"""
Status Query Gateway: the only read path open to unauthenticated clients.

The client token acts as a capability. A wrong token and an unknown id take
the same path and raise the same NotFound, so a caller guessing tokens learns
nothing about which applications exist.
"""
from __future__ import annotations

import hmac
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from errors import NotFound, ValidationError
from schemas.application import ApplicationStatusView
from services.store import ApplicationStore

logger = logging.getLogger(__name__)

MSG_MISSING_FIELDS = "application_id and client_token are required"
MSG_NOT_FOUND = "Application not found"
MSG_FETCH_FAILED = "Failed to fetch application"


def tokens_match(expected: Optional[str], supplied: str) -> bool:
    """Exact, constant-time comparison of client tokens."""
    if expected is None:
        # Still spend a comparison so a missing row costs the same as a bad token
        hmac.compare_digest(supplied.encode(), supplied.encode())
        return False
    return hmac.compare_digest(expected.encode(), supplied.encode())


async def query_status(
    session: AsyncSession,
    application_id: Optional[str],
    client_token: Optional[str],
) -> ApplicationStatusView:
    if not application_id or not client_token:
        logger.info(
            "Status query missing fields (application_id=%s, client_token=%s)",
            bool(application_id),
            bool(client_token),
        )
        raise ValidationError(MSG_MISSING_FIELDS)

    app = await ApplicationStore(session).get(application_id)
    if not tokens_match(app.client_token if app else None, client_token):
        logger.info("Status query for %s: not found or token mismatch", application_id)
        raise NotFound(MSG_NOT_FOUND)

    logger.debug("Status query for %s: %s", application_id, app.status)
    return ApplicationStatusView.model_validate(app)
