import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import init_db
from api.admin import router as admin_router
from api.applications import router as applications_router
from api.status import router as status_router

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    if settings.admin_api_token == "change-me":
        logger.warning("ADMIN_API_TOKEN is the default value; set it before exposing the admin console")
    await init_db()
    logger.info("%s started (database=%s)", settings.app_name, settings.database_url.split(":")[0])
    yield


app = FastAPI(
    title=settings.app_name,
    description="Loan application intake, token-gated status checks and admin review",
    version="0.1.0",
    lifespan=lifespan,
)

_origins = settings.cors_origin_list
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    # Wildcard origins cannot be combined with credentials
    allow_credentials="*" not in _origins,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

app.include_router(applications_router)
app.include_router(status_router)
app.include_router(admin_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
