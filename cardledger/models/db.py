"""
SQLAlchemy ORM models for persistent storage.

Models mirror the dataclass models but add database persistence.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CollectionDB(Base):
    """
    A named grouping of a user's cards.

    Row id=1 is the system-wide Main Collection; it has no owner and acts as
    the "all cards" view for every user.
    """

    __tablename__ = "collections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_id: Mapped[str | None] = mapped_column(String(255), index=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    cards: Mapped[list["CardDB"]] = relationship(back_populates="collection")

    def __repr__(self) -> str:
        return f"<CollectionDB(id={self.id}, name={self.name})>"


class CardDB(Base):
    """
    A card the user bought, and possibly sold.

    Money columns are fixed-point; dates are calendar dates without time.
    """

    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    collection_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collections.id"), index=True, default=1
    )

    name: Mapped[str] = mapped_column(String(255))
    category: Mapped[str] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str] = mapped_column(Text)

    status: Mapped[str] = mapped_column(String(20), default="bought")
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    sold_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    bought_date: Mapped[date] = mapped_column(Date)
    sold_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    graded: Mapped[bool] = mapped_column(Boolean, default=False)
    grading_company: Mapped[str | None] = mapped_column(String(10), nullable=True)
    grading_value: Mapped[Decimal | None] = mapped_column(Numeric(3, 1), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    collection: Mapped["CollectionDB"] = relationship(back_populates="cards")

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, name={self.name}, status={self.status})>"


class SubscriptionTypeDB(Base):
    """A subscription plan (Free, Premium)."""

    __tablename__ = "subscription_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), unique=True)
    price: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=0)
    # None means unlimited
    max_cards: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<SubscriptionTypeDB(name={self.name})>"


class UserSubscriptionDB(Base):
    """A user's subscription to a plan over a period."""

    __tablename__ = "user_subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    subscription_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("subscription_types.id")
    )
    status: Mapped[str] = mapped_column(String(20), default="active")
    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    subscription_type: Mapped["SubscriptionTypeDB"] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<UserSubscriptionDB(user_id={self.user_id}, status={self.status})>"


class CategoryDB(Base):
    """A card category offered to users (sport or game)."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<CategoryDB(name={self.name})>"
