from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import Principal, require_admin
from database import get_db
from errors import InvalidTransition, NotFound, StoreUnavailable
from schemas.application import AdminApplicationView, ApplicationStats, ApprovalRequest
from services.change_feed import change_feed
from services.review import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/applications", tags=["admin"])

MSG_APPLICATION_NOT_FOUND = "Application not found"
MSG_STORE_UNAVAILABLE = "Application store unavailable"
HEARTBEAT_SECONDS = 15.0


def _raise_http(exc: Exception) -> None:
    if isinstance(exc, NotFound):
        raise HTTPException(status_code=404, detail=MSG_APPLICATION_NOT_FOUND) from exc
    if isinstance(exc, InvalidTransition):
        raise HTTPException(status_code=409, detail=exc.message) from exc
    if isinstance(exc, StoreUnavailable):
        raise HTTPException(status_code=503, detail=MSG_STORE_UNAVAILABLE) from exc
    raise exc


@router.get("", response_model=list[AdminApplicationView])
async def list_applications(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    try:
        apps = await ReviewService(db).list_applications()
    except StoreUnavailable as e:
        _raise_http(e)
    return [AdminApplicationView.model_validate(a) for a in apps]


@router.get("/stats", response_model=ApplicationStats)
async def application_stats(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    try:
        return await ReviewService(db).stats()
    except StoreUnavailable as e:
        _raise_http(e)


async def _event_stream(request: Request):
    async with change_feed.subscribe() as queue:
        yield ": connected\n\n"
        while not await request.is_disconnected():
            try:
                event = await asyncio.wait_for(queue.get(), timeout=HEARTBEAT_SECONDS)
            except asyncio.TimeoutError:
                yield ": keep-alive\n\n"
                continue
            yield f"event: {event['type']}\ndata: {json.dumps(event)}\n\n"


@router.get("/events")
async def application_events(request: Request, principal: Principal = Depends(require_admin)):
    """Server-sent events: one message per insert, status change or delete."""
    logger.info("Admin %s subscribed to application events", principal.subject)
    return StreamingResponse(
        _event_stream(request),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/{application_id}", response_model=AdminApplicationView)
async def get_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    try:
        app = await ReviewService(db).get_application(application_id)
    except (NotFound, StoreUnavailable) as e:
        _raise_http(e)
    return AdminApplicationView.model_validate(app)


@router.post("/{application_id}/approve", response_model=AdminApplicationView)
async def approve_application(
    application_id: str,
    body: ApprovalRequest,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    try:
        app = await ReviewService(db).approve(application_id, body)
    except (NotFound, InvalidTransition, StoreUnavailable) as e:
        _raise_http(e)
    logger.info("Admin %s approved %s (amount=%s)", principal.subject, application_id, body.approved_amount)
    return AdminApplicationView.model_validate(app)


@router.post("/{application_id}/reject", response_model=AdminApplicationView)
async def reject_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    try:
        app = await ReviewService(db).reject(application_id)
    except (NotFound, InvalidTransition, StoreUnavailable) as e:
        _raise_http(e)
    logger.info("Admin %s rejected %s", principal.subject, application_id)
    return AdminApplicationView.model_validate(app)


@router.delete("/{application_id}", status_code=204)
async def delete_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    try:
        await ReviewService(db).delete(application_id)
    except (NotFound, InvalidTransition, StoreUnavailable) as e:
        _raise_http(e)
    return Response(status_code=204)
