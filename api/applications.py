from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from errors import StoreUnavailable
from schemas.application import LOAN_TYPES, ApplicationCreate, ApplicationReceipt, LoanTypeInfo
from services.store import ApplicationStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["applications"])

MSG_SUBMIT_FAILED = "Failed to submit application"


@router.get("/loan-types", response_model=list[LoanTypeInfo])
async def list_loan_types():
    return list(LOAN_TYPES.values())


@router.post("/applications", status_code=201, response_model=ApplicationReceipt)
async def create_application(body: ApplicationCreate, db: AsyncSession = Depends(get_db)):
    """Intake write: always lands as pending; id and client_token are generated here."""
    try:
        app = await ApplicationStore(db).insert(
            full_name=body.full_name,
            cpf=body.cpf,
            email=body.email,
            loan_type=body.loan_type,
        )
    except StoreUnavailable:
        return JSONResponse(status_code=500, content={"error": MSG_SUBMIT_FAILED})
    return ApplicationReceipt.model_validate(app)
