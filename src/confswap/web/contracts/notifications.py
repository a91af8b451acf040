"""Notification feed contracts."""

from typing import Optional

from pydantic import BaseModel, Field


class NotificationModel(BaseModel):
    id: str
    level: str
    title: str
    description: str
    execution_id: Optional[str] = None
    phase: Optional[str] = None
    tx_hash: Optional[str] = None
    created_at: float


class NotificationListResponse(BaseModel):
    """Status notifications, newest first."""

    success: bool = True
    notifications: list[NotificationModel] = Field(default_factory=list)
    total: int = 0
