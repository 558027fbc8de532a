"""
Subscription plans and feature gates.

Users without an active subscription are on the implicit Free plan:
a hard card cap and no Premium features. Premium unlocks custom
collections, spreadsheet import and PDF export, with no card cap.

INVARIANTS:
- Gates are checked BEFORE any write happens
- Exceedance is TERMINAL for the request (403), never a partial write
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.analysis.windows import resolve_today
from cardledger.config import settings
from cardledger.db.operations import (
    FREE_PLAN,
    PREMIUM_PLAN,
    count_cards,
    get_active_subscription,
    get_subscription_type,
)
from cardledger.models.card import ZERO
from cardledger.models.failure import CardLimitExceededError, PremiumRequiredError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Entitlements:
    """Features a plan unlocks."""

    collections: bool = False
    excel_import: bool = False
    pdf_export: bool = False


@dataclass(frozen=True, slots=True)
class Plan:
    """
    The plan a user is on right now.

    Attributes:
        name: Plan name ("Free" or "Premium")
        price: Monthly price
        max_cards: Card cap, None for unlimited
        start_date: When the subscription started, None on the implicit Free plan
    """

    name: str
    price: Decimal = ZERO
    max_cards: int | None = None
    start_date: date | None = None

    @property
    def is_premium(self) -> bool:
        return self.name == PREMIUM_PLAN

    @property
    def entitlements(self) -> Entitlements:
        premium = self.is_premium
        return Entitlements(collections=premium, excel_import=premium, pdf_export=premium)


async def _free_plan(session: AsyncSession) -> Plan:
    plan_type = await get_subscription_type(session, FREE_PLAN)
    if plan_type is None:
        return Plan(name=FREE_PLAN, max_cards=settings.free_card_limit)
    return Plan(name=plan_type.name, price=Decimal(plan_type.price), max_cards=plan_type.max_cards)


async def get_plan(session: AsyncSession, user_id: str, today: date | None = None) -> Plan:
    """Resolve the user's current plan, falling back to Free."""
    today = resolve_today(today)
    active = await get_active_subscription(session, user_id, today)
    if active is None:
        return await _free_plan(session)

    plan_type = active.subscription_type
    return Plan(
        name=plan_type.name,
        price=Decimal(plan_type.price),
        max_cards=plan_type.max_cards,
        start_date=active.start_date,
    )


async def require_premium(
    session: AsyncSession, user_id: str, feature: str, today: date | None = None
) -> Plan:
    """
    Gate a Premium feature.

    Raises:
        PremiumRequiredError: If the user is not on Premium.
    """
    plan = await get_plan(session, user_id, today)
    if not plan.is_premium:
        logger.warning("User %s denied Premium feature: %s", user_id, feature)
        raise PremiumRequiredError(feature)
    return plan


async def check_card_capacity(
    session: AsyncSession, user_id: str, adding: int = 1, today: date | None = None
) -> None:
    """
    Make sure the user may add `adding` more cards.

    Raises:
        CardLimitExceededError: If the plan's card cap would be exceeded.
    """
    plan = await get_plan(session, user_id, today)
    if plan.max_cards is None:
        return

    current = await count_cards(session, user_id)
    if current + adding > plan.max_cards:
        logger.warning(
            "User %s at card limit: %d + %d > %d", user_id, current, adding, plan.max_cards
        )
        raise CardLimitExceededError(plan.max_cards)
