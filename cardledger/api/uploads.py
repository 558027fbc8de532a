"""
Upload API endpoints.

Card images are stored under the configured upload directory and served
back from /uploads. Spreadsheet import and its template are Premium
features.
"""

import logging
import uuid
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, File, Response, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.api.cards import CardResponse
from cardledger.api.deps import CurrentUser, Today
from cardledger.config import settings
from cardledger.db import card_to_model, create_cards, get_collection
from cardledger.db.database import get_session
from cardledger.models.failure import NotFoundError, UploadRejectedError
from cardledger.parsers.spreadsheet import build_import_template, parse_spreadsheet
from cardledger.services.subscriptions import check_card_capacity, require_premium

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["uploads"])

# Accepted image content types -> stored file extension
IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
}

TEMPLATE_FILENAME = "card_import_template.csv"


class UploadResponse(BaseModel):
    """Response model for an image upload."""

    image_url: str


class ImportResponse(BaseModel):
    """Response model for spreadsheet import."""

    message: str
    imported: int
    cards: list[CardResponse]


def _megabytes(size: int) -> str:
    return f"{size // (1024 * 1024)} MB"


def store_image(directory: Path, filename: str, content: bytes) -> Path:
    """Write an image into the upload directory, creating it if needed."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_bytes(content)
    return path


@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    user_id: CurrentUser,
    image: Annotated[UploadFile, File(description="JPEG, PNG or GIF card picture")],
) -> UploadResponse:
    """
    Store a card picture.

    Returns the URL the picture is served from, to be saved as the card's
    image_url.
    """
    extension = IMAGE_TYPES.get(image.content_type or "")
    if extension is None:
        raise UploadRejectedError("Only JPEG, PNG and GIF images are allowed")

    content = await image.read()
    if not content:
        raise UploadRejectedError("No file uploaded")
    if len(content) > settings.max_image_bytes:
        raise UploadRejectedError(
            f"Image exceeds the {_megabytes(settings.max_image_bytes)} limit"
        )

    filename = f"{uuid.uuid4().hex}{extension}"
    await run_in_threadpool(store_image, settings.upload_dir, filename, content)

    logger.info("User %s uploaded image %s (%d bytes)", user_id, filename, len(content))
    return UploadResponse(image_url=f"/uploads/{filename}")


@router.post("/import/excel", response_model=ImportResponse)
async def import_spreadsheet(
    user_id: CurrentUser,
    today: Today,
    file: Annotated[UploadFile, File(description="Spreadsheet (.xlsx, .xls or .csv)")],
    session: Annotated[AsyncSession, Depends(get_session)],
    collection_id: int | None = None,
) -> ImportResponse:
    """
    Import cards from a spreadsheet. Premium only.

    Every row is validated before anything is written; one bad row
    rejects the whole file with the failing row numbers.
    """
    await require_premium(session, user_id, "Spreadsheet import", today=today)

    content = await file.read()
    if not content:
        raise UploadRejectedError("No file uploaded")
    if len(content) > settings.max_spreadsheet_bytes:
        raise UploadRejectedError(
            f"Spreadsheet exceeds the {_megabytes(settings.max_spreadsheet_bytes)} limit"
        )

    if collection_id is not None and await get_collection(session, user_id, collection_id) is None:
        raise NotFoundError("Collection")

    drafts = parse_spreadsheet(
        content, file.filename or "", today=today, collection_id=collection_id
    )
    await check_card_capacity(session, user_id, adding=len(drafts), today=today)

    cards = await create_cards(session, user_id, drafts)
    logger.info("User %s imported %d cards from %s", user_id, len(cards), file.filename)

    return ImportResponse(
        message=f"{len(cards)} cards imported successfully",
        imported=len(cards),
        cards=[CardResponse.from_card(card_to_model(card)) for card in cards],
    )


@router.get("/import/template")
async def download_import_template(
    user_id: CurrentUser,
    today: Today,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Response:
    """CSV template for spreadsheet import. Premium only."""
    await require_premium(session, user_id, "Spreadsheet import", today=today)
    return Response(
        content=build_import_template(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'},
    )
