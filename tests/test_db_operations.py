"""Tests for database CRUD operations."""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cardledger.config import MAIN_COLLECTION_ID, MAIN_COLLECTION_NAME
from cardledger.db.operations import (
    DEFAULT_CATEGORIES,
    FREE_PLAN,
    PREMIUM_PLAN,
    cancel_subscription,
    card_to_model,
    collection_has_cards,
    count_cards,
    count_collection_cards,
    create_card,
    create_cards,
    create_collection,
    delete_card,
    delete_collection,
    ensure_main_collection,
    get_active_subscription,
    get_card,
    get_collection,
    list_cards,
    list_categories,
    list_collections,
    list_subscription_types,
    mark_card_sold,
    seed_reference_data,
    start_subscription,
    update_card,
    update_collection,
)
from cardledger.models.card import CardStatus, GradingCompany
from cardledger.models.db import Base, CollectionDB, UserSubscriptionDB
from cardledger.services.card_validation import validate_card_draft

TODAY = date(2024, 6, 15)


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a seeded database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        await seed_reference_data(session)
        await session.commit()
        yield session


def draft(**overrides):
    data = {
        "name": "Sidney Crosby Rookie",
        "price": "120.00",
        "category": "Hockey",
        "bought_date": "2024-01-15",
    }
    data.update(overrides)
    return validate_card_draft(data)


class TestSeeding:
    async def test_main_collection_has_id_one(self, session: AsyncSession) -> None:
        """The Main Collection is created as row 1 with no owner."""
        main = await session.get(CollectionDB, MAIN_COLLECTION_ID)

        assert main is not None
        assert main.name == MAIN_COLLECTION_NAME
        assert main.user_id is None

    async def test_seeding_is_idempotent(self, session: AsyncSession) -> None:
        """Seeding twice adds nothing."""
        await seed_reference_data(session)
        await session.commit()

        collections = (await session.execute(select(CollectionDB))).scalars().all()
        assert len(collections) == 1
        assert len(await list_categories(session)) == len(DEFAULT_CATEGORIES)
        assert len(await list_subscription_types(session)) == 2

    async def test_main_collection_forced_to_id_one(self, async_engine) -> None:
        """A missing Main Collection is restored as id 1 beside other rows."""
        async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
        async with async_session() as session:
            session.add(CollectionDB(id=5, name="Stray", user_id="user-1"))
            await session.flush()

            main = await ensure_main_collection(session)

            assert main.id == MAIN_COLLECTION_ID

    async def test_categories_alphabetical(self, session: AsyncSession) -> None:
        """Categories are listed by name."""
        names = [c.name for c in await list_categories(session)]

        assert names == sorted(names)
        assert "Yu-Gi-Oh" in names


class TestCardOperations:
    async def test_create_and_get(self, session: AsyncSession) -> None:
        """Created cards can be read back by their owner."""
        card = await create_card(session, "user-1", draft())
        await session.commit()

        fetched = await get_card(session, "user-1", card.id)

        assert fetched is not None
        assert fetched.name == "Sidney Crosby Rookie"
        assert fetched.collection_id == MAIN_COLLECTION_ID
        assert fetched.created_at is not None

    async def test_other_users_cannot_read(self, session: AsyncSession) -> None:
        """Cards are scoped by user id."""
        card = await create_card(session, "user-1", draft())

        assert await get_card(session, "user-2", card.id) is None
        assert await list_cards(session, "user-2") == []

    async def test_list_by_collection(self, session: AsyncSession) -> None:
        """A custom collection lists its own cards; Main lists all."""
        binder = await create_collection(session, "user-1", "Binder")
        await create_card(session, "user-1", draft(name="In Main"))
        await create_card(session, "user-1", draft(name="In Binder", collection_id=binder.id))

        in_binder = await list_cards(session, "user-1", binder.id)
        in_main = await list_cards(session, "user-1", MAIN_COLLECTION_ID)
        everything = await list_cards(session, "user-1")

        assert [c.name for c in in_binder] == ["In Binder"]
        assert len(in_main) == 2
        assert len(everything) == 2

    async def test_update_card(self, session: AsyncSession) -> None:
        """Updates replace every field."""
        card = await create_card(session, "user-1", draft())

        updated = await update_card(
            session, "user-1", card.id, draft(name="Renamed", price="99", category="Other")
        )

        assert updated is not None
        assert updated.name == "Renamed"
        assert Decimal(updated.price) == Decimal(99)

    async def test_update_missing_card(self, session: AsyncSession) -> None:
        """Updating another user's card does nothing."""
        card = await create_card(session, "user-1", draft())

        assert await update_card(session, "user-2", card.id, draft()) is None

    async def test_mark_sold(self, session: AsyncSession) -> None:
        """Selling stamps status, price and date."""
        card = await create_card(session, "user-1", draft())

        sold = await mark_card_sold(session, "user-1", card.id, Decimal(200), date(2024, 3, 1))

        assert sold is not None
        assert sold.status == "sold"
        assert sold.sold_date == date(2024, 3, 1)

    async def test_delete_card(self, session: AsyncSession) -> None:
        """Deleted cards are gone; deleting twice reports False."""
        card = await create_card(session, "user-1", draft())

        assert await delete_card(session, "user-1", card.id) is True
        assert await delete_card(session, "user-1", card.id) is False
        assert await count_cards(session, "user-1") == 0

    async def test_bulk_create_and_count(self, session: AsyncSession) -> None:
        """Bulk inserts add every draft."""
        await create_cards(session, "user-1", [draft(name=f"Card {i}") for i in range(4)])

        assert await count_cards(session, "user-1") == 4
        assert await count_cards(session, "user-2") == 0

    async def test_card_to_model(self, session: AsyncSession) -> None:
        """Database rows convert to typed domain cards."""
        card = await create_card(
            session,
            "user-1",
            draft(
                status="sold",
                sold_price="180",
                sold_date="2024-02-01",
                graded=True,
                grading_company="BGS",
                grading_value="9.5",
            ),
        )

        model = card_to_model(card)

        assert model.status == CardStatus.SOLD
        assert model.price == Decimal("120.00")
        assert model.sold_price == Decimal(180)
        assert model.grading_company == GradingCompany.BGS
        assert model.grading_value == Decimal("9.5")
        assert model.profit() == Decimal(60)


class TestCollectionOperations:
    async def test_main_listed_first(self, session: AsyncSession) -> None:
        """The Main Collection comes before the user's own."""
        await create_collection(session, "user-1", "Binder")
        await create_collection(session, "user-2", "Not mine")

        names = [c.name for c in await list_collections(session, "user-1")]

        assert names == [MAIN_COLLECTION_NAME, "Binder"]

    async def test_collections_in_creation_order(self, session: AsyncSession) -> None:
        """Own collections follow Main in the order they were created."""
        for name in ("Zeta", "Alpha", "Mid"):
            await create_collection(session, "user-1", name)

        collections = await list_collections(session, "user-1")

        assert [c.name for c in collections] == [MAIN_COLLECTION_NAME, "Zeta", "Alpha", "Mid"]
        assert collections[0].id == MAIN_COLLECTION_ID

    async def test_get_collection_scoped(self, session: AsyncSession) -> None:
        """Other users' collections are invisible; Main is visible to all."""
        binder = await create_collection(session, "user-1", "Binder")

        assert await get_collection(session, "user-2", binder.id) is None
        assert await get_collection(session, "user-2", MAIN_COLLECTION_ID) is not None

    async def test_update_collection(self, session: AsyncSession) -> None:
        """Owners can rename their collections."""
        binder = await create_collection(session, "user-1", "Binder")

        renamed = await update_collection(session, "user-1", binder.id, "Box", "Shoebox")

        assert renamed is not None
        assert renamed.name == "Box"
        assert await update_collection(session, "user-2", binder.id, "Mine") is None

    async def test_count_and_delete(self, session: AsyncSession) -> None:
        """Card counts per collection drive the delete guard."""
        binder = await create_collection(session, "user-1", "Binder")
        card = await create_card(session, "user-1", draft(collection_id=binder.id))

        assert await count_collection_cards(session, binder.id) == 1
        assert await collection_has_cards(session, binder.id) is True

        await delete_card(session, "user-1", card.id)
        assert await collection_has_cards(session, binder.id) is False
        assert await delete_collection(session, "user-1", binder.id) is True
        assert await delete_collection(session, "user-1", binder.id) is False


class TestSubscriptionOperations:
    async def test_plans_by_price(self, session: AsyncSession) -> None:
        """Free comes before Premium."""
        plans = await list_subscription_types(session)

        assert [p.name for p in plans] == [FREE_PLAN, PREMIUM_PLAN]
        assert plans[0].max_cards == 10
        assert plans[1].max_cards is None
        assert Decimal(plans[1].price) == Decimal("9.99")

    async def test_no_subscription(self, session: AsyncSession) -> None:
        """New users have no active subscription."""
        assert await get_active_subscription(session, "user-1", TODAY) is None

    async def test_start_and_cancel(self, session: AsyncSession) -> None:
        """Subscribing activates the plan; cancelling ends it today."""
        subscription = await start_subscription(session, "user-1", PREMIUM_PLAN, TODAY)

        active = await get_active_subscription(session, "user-1", TODAY)
        assert active is not None
        assert active.id == subscription.id
        assert active.subscription_type.name == PREMIUM_PLAN

        assert await cancel_subscription(session, "user-1", TODAY) is True
        assert await get_active_subscription(session, "user-1", TODAY) is None
        assert await cancel_subscription(session, "user-1", TODAY) is False

    async def test_expired_subscription_ignored(self, session: AsyncSession) -> None:
        """An active row whose period ended yesterday no longer counts."""
        subscription = await start_subscription(session, "user-1", PREMIUM_PLAN, TODAY)
        subscription.end_date = TODAY - timedelta(days=1)
        await session.flush()

        assert await get_active_subscription(session, "user-1", TODAY) is None

    async def test_end_date_today_still_active(self, session: AsyncSession) -> None:
        """A period ending today is still active today."""
        subscription = await start_subscription(session, "user-1", PREMIUM_PLAN, TODAY)
        subscription.end_date = TODAY
        await session.flush()

        assert await get_active_subscription(session, "user-1", TODAY) is not None

    async def test_resubscribe_replaces_previous(self, session: AsyncSession) -> None:
        """Starting a plan cancels whatever was active before."""
        await start_subscription(session, "user-1", FREE_PLAN, TODAY)
        await start_subscription(session, "user-1", PREMIUM_PLAN, TODAY)

        rows = (
            (
                await session.execute(
                    select(UserSubscriptionDB).where(UserSubscriptionDB.status == "active")
                )
            )
            .unique()
            .scalars()
            .all()
        )
        assert len(rows) == 1
        assert rows[0].subscription_type.name == PREMIUM_PLAN

    async def test_unknown_plan(self, session: AsyncSession) -> None:
        """Unknown plan names are rejected."""
        with pytest.raises(ValueError, match="Unknown subscription plan"):
            await start_subscription(session, "user-1", "Platinum", TODAY)
