"""
Subscription API endpoints.

Exposes the available plans, the caller's current plan with its
entitlements and card usage, and plan changes (upgrade to Premium,
cancel back to Free). Payment itself happens elsewhere.
"""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.api.deps import CurrentUser, Today
from cardledger.db import (
    PREMIUM_PLAN,
    cancel_subscription,
    count_cards,
    list_subscription_types,
    start_subscription,
)
from cardledger.db.database import get_session
from cardledger.models.failure import NotFoundError
from cardledger.services.subscriptions import Plan, get_plan

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])


class PlanTypeResponse(BaseModel):
    """Response model for an available plan."""

    id: int
    name: str
    price: float
    max_cards: int | None = Field(default=None, description="None means unlimited")


class EntitlementsResponse(BaseModel):
    """Features unlocked by a plan."""

    collections: bool
    excel_import: bool
    pdf_export: bool


class CurrentPlanResponse(BaseModel):
    """Response model for the caller's current plan."""

    name: str
    price: float
    is_premium: bool
    is_free_tier: bool
    max_cards: int | None = None
    start_date: date | None = None
    entitlements: EntitlementsResponse

    @classmethod
    def from_plan(cls, plan: Plan) -> "CurrentPlanResponse":
        entitlements = plan.entitlements
        return cls(
            name=plan.name,
            price=float(plan.price),
            is_premium=plan.is_premium,
            is_free_tier=not plan.is_premium,
            max_cards=plan.max_cards,
            start_date=plan.start_date,
            entitlements=EntitlementsResponse(
                collections=entitlements.collections,
                excel_import=entitlements.excel_import,
                pdf_export=entitlements.pdf_export,
            ),
        )


class CardCountResponse(BaseModel):
    """Response model for card usage against the plan cap."""

    count: int
    max_cards: int | None = None
    remaining: int | None = Field(default=None, description="None means unlimited")


@router.get("/types", response_model=list[PlanTypeResponse])
async def get_subscription_types(
    _user_id: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[PlanTypeResponse]:
    """List the available plans, cheapest first."""
    plans = await list_subscription_types(session)
    return [
        PlanTypeResponse(id=p.id, name=p.name, price=float(p.price), max_cards=p.max_cards)
        for p in plans
    ]


@router.get("/current", response_model=CurrentPlanResponse)
async def get_current_subscription(
    user_id: CurrentUser,
    today: Today,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CurrentPlanResponse:
    """The caller's plan; Free when no subscription is active."""
    plan = await get_plan(session, user_id, today)
    return CurrentPlanResponse.from_plan(plan)


@router.get("/card-count", response_model=CardCountResponse)
async def get_card_count(
    user_id: CurrentUser,
    today: Today,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardCountResponse:
    """How many cards the caller has, and how many more the plan allows."""
    plan = await get_plan(session, user_id, today)
    count = await count_cards(session, user_id)
    remaining = None if plan.max_cards is None else max(plan.max_cards - count, 0)
    return CardCountResponse(count=count, max_cards=plan.max_cards, remaining=remaining)


@router.post("/premium", response_model=CurrentPlanResponse)
async def subscribe_premium(
    user_id: CurrentUser,
    today: Today,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CurrentPlanResponse:
    """Move the caller onto Premium. Already-Premium callers are left as is."""
    plan = await get_plan(session, user_id, today)
    if plan.is_premium:
        return CurrentPlanResponse.from_plan(plan)

    await start_subscription(session, user_id, PREMIUM_PLAN, today)
    logger.info("User %s subscribed to %s", user_id, PREMIUM_PLAN)
    return CurrentPlanResponse.from_plan(await get_plan(session, user_id, today))


@router.post("/cancel", response_model=CurrentPlanResponse)
async def cancel_user_subscription(
    user_id: CurrentUser,
    today: Today,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CurrentPlanResponse:
    """Cancel the caller's subscription, returning them to Free."""
    cancelled = await cancel_subscription(session, user_id, today)
    if not cancelled:
        raise NotFoundError("Active subscription")

    logger.info("User %s cancelled their subscription", user_id)
    return CurrentPlanResponse.from_plan(await get_plan(session, user_id, today))
