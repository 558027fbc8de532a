"""
Collection API endpoints.

The Main Collection (id 1) is shared by every user as the "all cards"
view and can never be renamed or deleted. Creating further collections
is a Premium feature.
"""

import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.api.deps import CurrentUser, Today
from cardledger.config import MAIN_COLLECTION_ID
from cardledger.db import (
    count_collection_cards,
    create_collection,
    delete_collection,
    get_collection,
    list_collections,
    update_collection,
)
from cardledger.db.database import get_session
from cardledger.models.db import CollectionDB
from cardledger.models.failure import (
    CollectionNotEmptyError,
    MainCollectionProtectedError,
    NotFoundError,
)
from cardledger.services.subscriptions import require_premium

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/collections", tags=["collections"])


class CollectionRequest(BaseModel):
    """Request model for creating or renaming a collection."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Rookie Cards"])
    description: str | None = None


class CollectionResponse(BaseModel):
    """Response model for a single collection."""

    id: int
    name: str
    description: str | None = None
    is_main: bool = Field(default=False, description="True for the shared Main Collection")
    created_at: datetime | None = None

    @classmethod
    def from_db(cls, collection: CollectionDB) -> "CollectionResponse":
        return cls(
            id=collection.id,
            name=collection.name,
            description=collection.description,
            is_main=collection.id == MAIN_COLLECTION_ID,
            created_at=collection.created_at,
        )


class CollectionDeleteResponse(BaseModel):
    """Response model for collection deletion."""

    id: int
    deleted: bool


@router.get("", response_model=list[CollectionResponse])
async def get_collections(
    user_id: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[CollectionResponse]:
    """List the Main Collection followed by the user's own collections."""
    collections = await list_collections(session, user_id)
    return [CollectionResponse.from_db(c) for c in collections]


@router.post("", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
async def create_user_collection(
    request: CollectionRequest,
    user_id: CurrentUser,
    today: Today,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionResponse:
    """Create a collection. Premium only."""
    await require_premium(session, user_id, "Creating collections", today=today)

    collection = await create_collection(
        session, user_id, request.name.strip(), request.description
    )
    logger.info("User %s created collection %d", user_id, collection.id)
    return CollectionResponse.from_db(collection)


@router.put("/{collection_id}", response_model=CollectionResponse)
async def update_user_collection(
    collection_id: int,
    request: CollectionRequest,
    user_id: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionResponse:
    """Rename a collection."""
    if collection_id == MAIN_COLLECTION_ID:
        raise MainCollectionProtectedError("modify")

    collection = await update_collection(
        session, user_id, collection_id, request.name.strip(), request.description
    )
    if collection is None:
        raise NotFoundError("Collection")
    return CollectionResponse.from_db(collection)


@router.delete("/{collection_id}", response_model=CollectionDeleteResponse)
async def delete_user_collection(
    collection_id: int,
    user_id: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionDeleteResponse:
    """
    Delete an empty collection.

    Collections still holding cards are refused; move or delete the
    cards first.
    """
    if collection_id == MAIN_COLLECTION_ID:
        raise MainCollectionProtectedError("delete")

    if await get_collection(session, user_id, collection_id) is None:
        raise NotFoundError("Collection")

    card_count = await count_collection_cards(session, collection_id)
    if card_count:
        raise CollectionNotEmptyError(card_count)

    await delete_collection(session, user_id, collection_id)
    logger.info("User %s deleted collection %d", user_id, collection_id)
    return CollectionDeleteResponse(id=collection_id, deleted=True)
