import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from cardledger.api import (
    cards_router,
    categories_router,
    collections_router,
    health_router,
    statistics_router,
    subscriptions_router,
    uploads_router,
)
from cardledger.config import settings
from cardledger.db.database import init_db
from cardledger.models.failure import KnownError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("cardledger"),
    lifespan=lifespan,
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Render explainable failures with their status code and classification."""
    logger.warning("%s: %s", exc.kind.value, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


app.include_router(cards_router)
app.include_router(categories_router)
app.include_router(collections_router)
app.include_router(health_router)
app.include_router(statistics_router)
app.include_router(subscriptions_router)
app.include_router(uploads_router)

settings.upload_dir.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
