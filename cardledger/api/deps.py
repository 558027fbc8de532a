"""
Request-scoped dependencies shared by the routers.

The user id arrives in the X-User-Id header, already verified upstream
by the identity provider. It is passed explicitly into every repository
and engine call.
"""

from datetime import date
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status


async def get_current_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> str:
    """Caller's user id. 401 when the header is missing or blank."""
    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return x_user_id.strip()


def get_today() -> date:
    """Reference date for windows and defaults; overridden in tests."""
    return date.today()


CurrentUser = Annotated[str, Depends(get_current_user_id)]
Today = Annotated[date, Depends(get_today)]
