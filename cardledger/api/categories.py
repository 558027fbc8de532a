"""
Category API endpoints.

Categories are reference data seeded at startup; they are readable
without a user id.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db import list_categories
from cardledger.db.database import get_session

router = APIRouter(prefix="/api/categories", tags=["categories"])


class CategoryResponse(BaseModel):
    """Response model for a category."""

    id: int
    name: str


@router.get("", response_model=list[CategoryResponse])
async def get_categories(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[CategoryResponse]:
    """List every category, alphabetically."""
    categories = await list_categories(session)
    return [CategoryResponse(id=c.id, name=c.name) for c in categories]
