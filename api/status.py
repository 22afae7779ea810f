from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from errors import NotFound, StoreUnavailable, ValidationError
from services.gateway import MSG_FETCH_FAILED, MSG_MISSING_FIELDS, MSG_NOT_FOUND, query_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["status"])


async def _read_query(request: Request) -> dict:
    """Parse the JSON body leniently; anything that is not an object counts as empty."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _string_or_none(value) -> str | None:
    return value if isinstance(value, str) else None


@router.post("/check-application-status")
async def check_application_status(request: Request, db: AsyncSession = Depends(get_db)):
    body = await _read_query(request)
    application_id = _string_or_none(body.get("application_id"))
    client_token = _string_or_none(body.get("client_token"))

    try:
        view = await query_status(db, application_id, client_token)
    except ValidationError:
        return JSONResponse(status_code=400, content={"error": MSG_MISSING_FIELDS})
    except NotFound:
        return JSONResponse(status_code=404, content={"error": MSG_NOT_FOUND})
    except StoreUnavailable:
        logger.error("Status query for %s failed: store unavailable", application_id)
        return JSONResponse(status_code=500, content={"error": MSG_FETCH_FAILED})

    return {"data": view.model_dump(mode="json")}
