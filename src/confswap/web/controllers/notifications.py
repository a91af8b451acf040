"""Notification feed endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from confswap.api.dependencies import get_session
from confswap.session import SwapSession
from confswap.web.contracts.notifications import NotificationListResponse

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    limit: Optional[int] = Query(None, ge=1, le=200),
    session: SwapSession = Depends(get_session),
) -> NotificationListResponse:
    """Get status notifications, newest first."""
    items = session.notifications.items(limit)
    return NotificationListResponse(
        notifications=[item.to_dict() for item in items],
        total=len(session.notifications),
    )
