"""
Database CRUD operations.

Provides async functions for creating, reading, updating, and deleting
cards, collections, subscriptions and categories. Every card and
collection query is scoped by the caller's user id.
"""

import logging
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.config import MAIN_COLLECTION_ID, MAIN_COLLECTION_NAME, settings
from cardledger.models.card import Card, CardDraft, CardStatus, GradingCompany
from cardledger.models.db import (
    CardDB,
    CategoryDB,
    CollectionDB,
    SubscriptionTypeDB,
    UserSubscriptionDB,
)

logger = logging.getLogger(__name__)

FREE_PLAN = "Free"
PREMIUM_PLAN = "Premium"

DEFAULT_CATEGORIES = (
    "Baseball",
    "Basketball",
    "Football",
    "Hockey",
    "Soccer",
    "UFC",
    "F1",
    "Golf",
    "Tennis",
    "Pokemon",
    "Magic",
    "Yu-Gi-Oh",
    "Other",
)

# --- Card Operations ---


async def list_cards(
    session: AsyncSession, user_id: str, collection_id: int | None = None
) -> list[CardDB]:
    """
    List a user's cards.

    The Main Collection (or no collection) lists every card the user owns.
    """
    query = select(CardDB).where(CardDB.user_id == user_id)
    if collection_id is not None and collection_id != MAIN_COLLECTION_ID:
        query = query.where(CardDB.collection_id == collection_id)

    result = await session.execute(query.order_by(CardDB.id))
    return list(result.scalars().all())


async def get_card(session: AsyncSession, user_id: str, card_id: int) -> CardDB | None:
    """Get one of the user's cards. Returns None if missing or not owned."""
    result = await session.execute(
        select(CardDB).where(CardDB.id == card_id, CardDB.user_id == user_id)
    )
    return result.scalar_one_or_none()


def _apply_draft(card: CardDB, draft: CardDraft) -> None:
    card.name = draft.name
    card.price = draft.price
    card.category = draft.category
    card.bought_date = draft.bought_date
    card.status = draft.status.value
    card.sold_price = draft.sold_price
    card.sold_date = draft.sold_date
    card.description = draft.description
    card.image_url = draft.image_url or settings.default_image_url
    card.collection_id = draft.collection_id
    card.graded = draft.graded
    card.grading_company = draft.grading_company.value if draft.grading_company else None
    card.grading_value = draft.grading_value


async def create_card(session: AsyncSession, user_id: str, draft: CardDraft) -> CardDB:
    """Insert a validated card for a user."""
    (card,) = await create_cards(session, user_id, [draft])
    return card


async def create_cards(
    session: AsyncSession, user_id: str, drafts: Sequence[CardDraft]
) -> list[CardDB]:
    """
    Insert several validated cards in one flush.

    Used by spreadsheet import; either all rows are added or, if the
    session is rolled back, none are.
    """
    cards: list[CardDB] = []
    for draft in drafts:
        card = CardDB(user_id=user_id)
        _apply_draft(card, draft)
        session.add(card)
        cards.append(card)

    await session.flush()
    for card in cards:
        # Load server-side defaults (created_at) without lazy IO later
        await session.refresh(card)
    return cards


async def update_card(
    session: AsyncSession, user_id: str, card_id: int, draft: CardDraft
) -> CardDB | None:
    """
    Replace every field of a user's card.

    Returns None if the card does not exist for this user.
    """
    card = await get_card(session, user_id, card_id)
    if card is None:
        return None

    _apply_draft(card, draft)
    await session.flush()
    return card


async def mark_card_sold(
    session: AsyncSession,
    user_id: str,
    card_id: int,
    sold_price: Decimal,
    sold_date: date,
) -> CardDB | None:
    """Stamp the sale on a bought card. Returns None if not found."""
    card = await get_card(session, user_id, card_id)
    if card is None:
        return None

    card.status = CardStatus.SOLD.value
    card.sold_price = sold_price
    card.sold_date = sold_date
    await session.flush()
    return card


async def delete_card(session: AsyncSession, user_id: str, card_id: int) -> bool:
    """
    Delete a user's card permanently.

    Returns True if deleted, False if not found.
    """
    card = await get_card(session, user_id, card_id)
    if card is None:
        return False

    await session.delete(card)
    await session.flush()
    return True


async def count_cards(session: AsyncSession, user_id: str) -> int:
    """Number of cards a user has, across all collections."""
    result = await session.execute(
        select(func.count()).select_from(CardDB).where(CardDB.user_id == user_id)
    )
    return int(result.scalar_one())


def card_to_model(card: CardDB) -> Card:
    """Convert a database card to a domain model."""
    return Card(
        id=card.id,
        name=card.name,
        price=Decimal(card.price),
        status=CardStatus(card.status),
        bought_date=card.bought_date,
        sold_price=Decimal(card.sold_price) if card.sold_price is not None else None,
        sold_date=card.sold_date,
        category=card.category,
        collection_id=card.collection_id,
        graded=bool(card.graded),
        grading_company=GradingCompany(card.grading_company) if card.grading_company else None,
        grading_value=(
            Decimal(card.grading_value) if card.grading_value is not None else None
        ),
        image_url=card.image_url,
        description=card.description,
        user_id=card.user_id,
        created_at=card.created_at,
    )


# --- Collection Operations ---


async def list_collections(session: AsyncSession, user_id: str) -> list[CollectionDB]:
    """The Main Collection first, then the user's own collections."""
    result = await session.execute(
        select(CollectionDB)
        .where(
            or_(
                CollectionDB.id == MAIN_COLLECTION_ID,
                CollectionDB.user_id == user_id,
            )
        )
        # Main Collection is id 1, so id order lists it first
        .order_by(CollectionDB.id)
    )
    return list(result.scalars().all())


async def get_collection(
    session: AsyncSession, user_id: str, collection_id: int
) -> CollectionDB | None:
    """
    Get a collection visible to the user.

    The Main Collection is visible to everyone; others only to their owner.
    """
    query = select(CollectionDB).where(CollectionDB.id == collection_id)
    if collection_id != MAIN_COLLECTION_ID:
        query = query.where(CollectionDB.user_id == user_id)
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def create_collection(
    session: AsyncSession, user_id: str, name: str, description: str | None = None
) -> CollectionDB:
    """Create a new collection owned by a user."""
    collection = CollectionDB(name=name, description=description, user_id=user_id)
    session.add(collection)
    await session.flush()
    await session.refresh(collection)
    return collection


async def update_collection(
    session: AsyncSession,
    user_id: str,
    collection_id: int,
    name: str,
    description: str | None = None,
) -> CollectionDB | None:
    """Rename a user's collection. Returns None if not found."""
    result = await session.execute(
        select(CollectionDB).where(
            CollectionDB.id == collection_id, CollectionDB.user_id == user_id
        )
    )
    collection = result.scalar_one_or_none()
    if collection is None:
        return None

    collection.name = name
    collection.description = description
    await session.flush()
    return collection


async def count_collection_cards(session: AsyncSession, collection_id: int) -> int:
    """Number of cards filed under a collection."""
    result = await session.execute(
        select(func.count()).select_from(CardDB).where(CardDB.collection_id == collection_id)
    )
    return int(result.scalar_one())


async def collection_has_cards(session: AsyncSession, collection_id: int) -> bool:
    return await count_collection_cards(session, collection_id) > 0


async def delete_collection(session: AsyncSession, user_id: str, collection_id: int) -> bool:
    """
    Delete a user's collection.

    Returns True if deleted, False if not found.
    """
    result = await session.execute(
        select(CollectionDB).where(
            CollectionDB.id == collection_id, CollectionDB.user_id == user_id
        )
    )
    collection = result.scalar_one_or_none()
    if collection is None:
        return False

    await session.delete(collection)
    await session.flush()
    return True


async def ensure_main_collection(session: AsyncSession) -> CollectionDB:
    """
    Make sure the system Main Collection exists with id 1.

    On an empty table the row is inserted without an explicit id so the
    sequence (PostgreSQL) stays in step; otherwise id 1 is forced.
    """
    main = await session.get(CollectionDB, MAIN_COLLECTION_ID)
    if main is not None:
        return main

    existing = await session.execute(select(func.count()).select_from(CollectionDB))
    main = CollectionDB(name=MAIN_COLLECTION_NAME, description="All your cards", user_id=None)
    if existing.scalar_one():
        main.id = MAIN_COLLECTION_ID
    session.add(main)
    await session.flush()

    if main.id != MAIN_COLLECTION_ID:
        msg = f"Main Collection was created with id {main.id}, expected {MAIN_COLLECTION_ID}"
        raise RuntimeError(msg)

    logger.info("Created %s", MAIN_COLLECTION_NAME)
    return main


# --- Subscription Operations ---


async def list_subscription_types(session: AsyncSession) -> list[SubscriptionTypeDB]:
    """All plans, cheapest first."""
    result = await session.execute(
        select(SubscriptionTypeDB).order_by(SubscriptionTypeDB.price, SubscriptionTypeDB.id)
    )
    return list(result.scalars().all())


async def get_subscription_type(session: AsyncSession, name: str) -> SubscriptionTypeDB | None:
    result = await session.execute(
        select(SubscriptionTypeDB).where(SubscriptionTypeDB.name == name)
    )
    return result.scalar_one_or_none()


async def get_active_subscription(
    session: AsyncSession, user_id: str, today: date
) -> UserSubscriptionDB | None:
    """
    The user's most recent active subscription still in its period.

    Returns None when the user is on the implicit Free plan.
    """
    result = await session.execute(
        select(UserSubscriptionDB)
        .where(
            UserSubscriptionDB.user_id == user_id,
            UserSubscriptionDB.status == "active",
            or_(UserSubscriptionDB.end_date.is_(None), UserSubscriptionDB.end_date >= today),
        )
        .order_by(UserSubscriptionDB.created_at.desc(), UserSubscriptionDB.id.desc())
        .limit(1)
    )
    return result.unique().scalar_one_or_none()


async def _active_subscriptions(session: AsyncSession, user_id: str) -> list[UserSubscriptionDB]:
    result = await session.execute(
        select(UserSubscriptionDB).where(
            UserSubscriptionDB.user_id == user_id,
            UserSubscriptionDB.status == "active",
        )
    )
    return list(result.unique().scalars().all())


async def cancel_subscription(session: AsyncSession, user_id: str, today: date) -> bool:
    """
    Cancel every active subscription of a user as of today.

    Returns True if anything was cancelled.
    """
    active = await _active_subscriptions(session, user_id)
    for subscription in active:
        subscription.status = "cancelled"
        subscription.end_date = today

    await session.flush()
    return bool(active)


async def start_subscription(
    session: AsyncSession, user_id: str, plan_name: str, today: date
) -> UserSubscriptionDB:
    """
    Move a user onto a plan, cancelling whatever was active.

    Raises ValueError if the plan does not exist.
    """
    plan = await get_subscription_type(session, plan_name)
    if plan is None:
        msg = f"Unknown subscription plan '{plan_name}'"
        raise ValueError(msg)

    await cancel_subscription(session, user_id, today)

    subscription = UserSubscriptionDB(
        user_id=user_id,
        subscription_type_id=plan.id,
        status="active",
        start_date=today,
    )
    session.add(subscription)
    await session.flush()
    await session.refresh(subscription)
    return subscription


async def ensure_subscription_types(session: AsyncSession) -> None:
    """Seed the Free and Premium plans if missing."""
    plans = (
        (FREE_PLAN, Decimal(0), settings.free_card_limit),
        (PREMIUM_PLAN, Decimal("9.99"), None),
    )
    for name, price, max_cards in plans:
        if await get_subscription_type(session, name) is None:
            session.add(SubscriptionTypeDB(name=name, price=price, max_cards=max_cards))
    await session.flush()


# --- Category Operations ---


async def list_categories(session: AsyncSession) -> list[CategoryDB]:
    """All categories, alphabetically."""
    result = await session.execute(select(CategoryDB).order_by(CategoryDB.name))
    return list(result.scalars().all())


async def ensure_categories(session: AsyncSession, names: Sequence[str] = DEFAULT_CATEGORIES) -> int:
    """
    Seed categories that do not exist yet.

    Returns the number of categories added.
    """
    result = await session.execute(select(CategoryDB.name))
    existing = set(result.scalars().all())

    missing = [name for name in names if name not in existing]
    session.add_all(CategoryDB(name=name) for name in missing)
    await session.flush()
    return len(missing)


async def seed_reference_data(session: AsyncSession) -> None:
    """Insert the Main Collection, plans and categories if missing."""
    await ensure_main_collection(session)
    await ensure_subscription_types(session)
    added = await ensure_categories(session)
    if added:
        logger.info("Seeded %d categories", added)
