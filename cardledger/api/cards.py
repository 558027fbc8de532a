"""
Card API endpoints.

Provides CRUD operations for a user's cards and the bought -> sold
transition. Every payload goes through the card write boundary before
it reaches the database.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.api.deps import CurrentUser, Today
from cardledger.db import (
    card_to_model,
    create_card,
    delete_card,
    get_card,
    get_collection,
    list_cards,
    mark_card_sold,
    update_card,
)
from cardledger.db.database import get_session
from cardledger.models.card import Card
from cardledger.models.failure import NotFoundError
from cardledger.services.card_validation import validate_card_draft, validate_sale
from cardledger.services.subscriptions import check_card_capacity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cards", tags=["cards"])


def _to_float(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


class CardRequest(BaseModel):
    """
    Request model for creating or replacing a card.

    Accepts snake_case or camelCase field names. Business rules (required
    fields, positive prices, date order, grading) are checked after
    parsing so they answer 400 with a specific message.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = None
    price: Decimal | None = None
    category: str | None = None
    bought_date: date | None = None
    status: str | None = None
    sold_price: Decimal | None = None
    sold_date: date | None = None
    description: str | None = None
    image_url: str | None = None
    collection_id: int | None = None
    graded: bool = False
    grading_company: str | None = None
    grading_value: Decimal | None = None


class SellRequest(BaseModel):
    """Request model for selling a card."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sold_price: Decimal | None = Field(default=None, examples=["350.00"])
    sold_date: date | None = None


class CardResponse(BaseModel):
    """Response model for a single card."""

    id: int
    name: str
    price: float
    status: str
    category: str | None = None
    bought_date: date | None = None
    sold_price: float | None = None
    sold_date: date | None = None
    collection_id: int
    graded: bool = False
    grading_company: str | None = None
    grading_value: float | None = None
    image_url: str | None = None
    description: str | None = None
    profit: float | None = Field(default=None, description="Realized profit, sold cards only")
    roi: float | None = Field(default=None, description="Return on investment in percent")
    created_at: datetime | None = None

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            id=card.id,
            name=card.name,
            price=float(card.price),
            status=card.status.value,
            category=card.category,
            bought_date=card.bought_date,
            sold_price=_to_float(card.sold_price),
            sold_date=card.sold_date,
            collection_id=card.collection_id,
            graded=card.graded,
            grading_company=card.grading_company.value if card.grading_company else None,
            grading_value=_to_float(card.grading_value),
            image_url=card.image_url,
            description=card.description,
            profit=float(card.profit()) if card.is_sold else None,
            roi=_to_float(card.roi()),
            created_at=card.created_at,
        )


class CardListResponse(BaseModel):
    """Response model for a list of cards."""

    cards: list[CardResponse]
    count: int


class DeleteResponse(BaseModel):
    """Response model for delete operations."""

    id: int
    deleted: bool


async def _require_collection(session: AsyncSession, user_id: str, collection_id: int) -> None:
    if await get_collection(session, user_id, collection_id) is None:
        raise NotFoundError("Collection")


@router.get("", response_model=CardListResponse)
async def get_cards(
    user_id: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
    collection_id: int | None = None,
) -> CardListResponse:
    """
    List the user's cards.

    Without a collection id, or with the Main Collection (1), every card
    is returned.
    """
    cards = await list_cards(session, user_id, collection_id)
    return CardListResponse(
        cards=[CardResponse.from_card(card_to_model(card)) for card in cards],
        count=len(cards),
    )


@router.get("/{card_id}", response_model=CardResponse)
async def get_user_card(
    card_id: int,
    user_id: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """Get one card. 404 if it does not exist or belongs to someone else."""
    card = await get_card(session, user_id, card_id)
    if card is None:
        raise NotFoundError("Card")
    return CardResponse.from_card(card_to_model(card))


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_user_card(
    request: CardRequest,
    user_id: CurrentUser,
    today: Today,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """
    Add a card.

    Free users are capped at the plan's card limit (403 once reached).
    """
    draft = validate_card_draft(request.model_dump())
    await _require_collection(session, user_id, draft.collection_id)
    await check_card_capacity(session, user_id, today=today)

    card = await create_card(session, user_id, draft)
    logger.info("User %s added card %d (%s)", user_id, card.id, card.name)
    return CardResponse.from_card(card_to_model(card))


@router.put("/{card_id}", response_model=CardResponse)
async def update_user_card(
    card_id: int,
    request: CardRequest,
    user_id: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """Replace every field of a card."""
    if await get_card(session, user_id, card_id) is None:
        raise NotFoundError("Card")

    draft = validate_card_draft(request.model_dump())
    await _require_collection(session, user_id, draft.collection_id)

    card = await update_card(session, user_id, card_id, draft)
    if card is None:
        raise NotFoundError("Card")
    return CardResponse.from_card(card_to_model(card))


@router.post("/{card_id}/sell", response_model=CardResponse)
async def sell_user_card(
    card_id: int,
    request: SellRequest,
    user_id: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """Record the sale of a bought card."""
    existing = await get_card(session, user_id, card_id)
    if existing is None:
        raise NotFoundError("Card")

    sold_price, sold_date = validate_sale(
        card_to_model(existing), request.sold_price, request.sold_date
    )
    card = await mark_card_sold(session, user_id, card_id, sold_price, sold_date)
    if card is None:
        raise NotFoundError("Card")

    logger.info("User %s sold card %d for %s", user_id, card_id, sold_price)
    return CardResponse.from_card(card_to_model(card))


@router.delete("/{card_id}", response_model=DeleteResponse)
async def delete_user_card(
    card_id: int,
    user_id: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """Delete a card permanently."""
    deleted = await delete_card(session, user_id, card_id)
    if not deleted:
        raise NotFoundError("Card")

    logger.info("User %s deleted card %d", user_id, card_id)
    return DeleteResponse(id=card_id, deleted=True)
