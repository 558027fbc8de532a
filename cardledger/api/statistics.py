"""
Statistics API endpoints.

Both views run over every card the user owns or owned, regardless of
collection. A repository failure while loading cards degrades to an
empty card list instead of failing the request.
"""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.analysis import Timeframe, build_valuation_series, compute_stats
from cardledger.api.deps import CurrentUser, Today
from cardledger.db import card_to_model, list_cards
from cardledger.db.database import get_session
from cardledger.models.card import Card
from cardledger.models.stats import (
    CardStats,
    CategoryInvestment,
    CategoryProfit,
    CategoryRoi,
    MonthlySales,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/statistics", tags=["statistics"])


class CategoryProfitResponse(BaseModel):
    total_profit: float
    total_sold: float
    count: int
    average_profit: float

    @classmethod
    def from_entry(cls, entry: CategoryProfit) -> "CategoryProfitResponse":
        return cls(
            total_profit=float(entry.total_profit),
            total_sold=float(entry.total_sold),
            count=entry.count,
            average_profit=float(entry.average_profit),
        )


class CategoryInvestmentResponse(BaseModel):
    total_investment: float
    count: int
    average_investment: float

    @classmethod
    def from_entry(cls, entry: CategoryInvestment) -> "CategoryInvestmentResponse":
        return cls(
            total_investment=float(entry.total_investment),
            count=entry.count,
            average_investment=float(entry.average_investment),
        )


class CategoryRoiResponse(BaseModel):
    total_profit: float
    total_investment: float
    count: int
    roi: float = Field(..., description="Percent")

    @classmethod
    def from_entry(cls, entry: CategoryRoi) -> "CategoryRoiResponse":
        return cls(
            total_profit=float(entry.total_profit),
            total_investment=float(entry.total_investment),
            count=entry.count,
            roi=float(entry.roi),
        )


class MonthlySalesResponse(BaseModel):
    total_sales: float
    count: int
    total_profit: float

    @classmethod
    def from_entry(cls, entry: MonthlySales) -> "MonthlySalesResponse":
        return cls(
            total_sales=float(entry.total_sales),
            count=entry.count,
            total_profit=float(entry.total_profit),
        )


class RankedProfit(CategoryProfitResponse):
    category: str


class RankedInvestment(CategoryInvestmentResponse):
    category: str


class RankedRoi(CategoryRoiResponse):
    category: str


class RankedMonth(MonthlySalesResponse):
    month: str = Field(..., description="YYYY-MM")


class StatisticsResponse(BaseModel):
    """Response model for investment statistics over a window."""

    timeframe: Timeframe
    bought_investment: float
    sold_investment: float
    total_investment: float
    total_sold: float
    profit: float
    roi: float = Field(..., description="Overall ROI of sold cards, percent")
    cards_bought: int
    cards_sold: int

    profits_by_category: dict[str, CategoryProfitResponse]
    investments_by_category: dict[str, CategoryInvestmentResponse]
    roi_by_category: dict[str, CategoryRoiResponse]
    sales_by_month: dict[str, MonthlySalesResponse]

    top_categories: list[RankedProfit]
    top_investment_categories: list[RankedInvestment]
    top_roi_categories: list[RankedRoi]
    top_months: list[RankedMonth]

    @classmethod
    def from_stats(cls, stats: CardStats, timeframe: Timeframe) -> "StatisticsResponse":
        return cls(
            timeframe=timeframe,
            bought_investment=float(stats.bought_investment),
            sold_investment=float(stats.sold_investment),
            total_investment=float(stats.total_investment),
            total_sold=float(stats.total_sold),
            profit=float(stats.profit),
            roi=float(stats.roi),
            cards_bought=stats.cards_bought,
            cards_sold=stats.cards_sold,
            profits_by_category={
                k: CategoryProfitResponse.from_entry(v)
                for k, v in stats.profits_by_category.items()
            },
            investments_by_category={
                k: CategoryInvestmentResponse.from_entry(v)
                for k, v in stats.investments_by_category.items()
            },
            roi_by_category={
                k: CategoryRoiResponse.from_entry(v) for k, v in stats.roi_by_category.items()
            },
            sales_by_month={
                k: MonthlySalesResponse.from_entry(v) for k, v in stats.sales_by_month.items()
            },
            top_categories=[
                RankedProfit(category=k, **CategoryProfitResponse.from_entry(v).model_dump())
                for k, v in stats.top_categories
            ],
            top_investment_categories=[
                RankedInvestment(
                    category=k, **CategoryInvestmentResponse.from_entry(v).model_dump()
                )
                for k, v in stats.top_investment_categories
            ],
            top_roi_categories=[
                RankedRoi(category=k, **CategoryRoiResponse.from_entry(v).model_dump())
                for k, v in stats.top_roi_categories
            ],
            top_months=[
                RankedMonth(month=k, **MonthlySalesResponse.from_entry(v).model_dump())
                for k, v in stats.top_months
            ],
        )


class ValuationPointResponse(BaseModel):
    date: date
    display_date: str = Field(..., description="DD-MM-YYYY")
    value: float


class ValuationResponse(BaseModel):
    """Response model for the collection value series."""

    timeframe: Timeframe
    points: list[ValuationPointResponse]


async def _load_cards(session: AsyncSession, user_id: str) -> list[Card]:
    """Every card of the user; empty when the repository fails."""
    try:
        rows = await list_cards(session, user_id)
    except (SQLAlchemyError, OSError):
        logger.exception("Could not load cards of user %s for statistics", user_id)
        await session.rollback()
        return []
    return [card_to_model(row) for row in rows]


@router.get("", response_model=StatisticsResponse)
async def get_statistics(
    user_id: CurrentUser,
    today: Today,
    session: Annotated[AsyncSession, Depends(get_session)],
    timeframe: Timeframe = Timeframe.ALL,
) -> StatisticsResponse:
    """Investment statistics for the week, month, year or all time."""
    cards = await _load_cards(session, user_id)
    stats = compute_stats(cards, timeframe, today=today)
    return StatisticsResponse.from_stats(stats, timeframe)


@router.get("/valuation", response_model=ValuationResponse)
async def get_valuation(
    user_id: CurrentUser,
    today: Today,
    session: Annotated[AsyncSession, Depends(get_session)],
    timeframe: Timeframe = Timeframe.ALL,
) -> ValuationResponse:
    """Collection value over time, ending today."""
    cards = await _load_cards(session, user_id)
    points = build_valuation_series(cards, timeframe, today=today)
    return ValuationResponse(
        timeframe=timeframe,
        points=[
            ValuationPointResponse(
                date=p.date, display_date=p.display_date, value=float(p.value)
            )
            for p in points
        ],
    )
