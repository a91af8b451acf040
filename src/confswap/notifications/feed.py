"""User-facing status notifications.

The orchestrator announces phase changes through a Notifier. The feed keeps
a bounded history that the UI polls, and logs every entry.
"""

import logging
import time
import uuid
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    """Severity shown by the UI."""
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A single status message (the UI renders it as a toast)."""

    level: NotificationLevel
    title: str
    description: str
    execution_id: Optional[str] = None
    phase: Optional[str] = None
    tx_hash: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "level": self.level.value,
            "title": self.title,
            "description": self.description,
            "execution_id": self.execution_id,
            "phase": self.phase,
            "tx_hash": self.tx_hash,
            "created_at": self.created_at,
        }


class Notifier(ABC):
    """Receives status notifications."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        """Publish a notification."""
        pass

    def dismiss(self) -> None:
        """Clear any notifications still on screen."""
        pass


_LOG_LEVELS = {
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.ERROR: logging.WARNING,
}


class NotificationFeed(Notifier):
    """Bounded in-memory notification history."""

    def __init__(self, max_history: int = 50):
        self._items: deque[Notification] = deque(maxlen=max_history)

    def notify(self, notification: Notification) -> None:
        logger.log(
            _LOG_LEVELS[notification.level],
            f"[{notification.level.value}] {notification.title}: {notification.description}",
        )
        self._items.append(notification)

    def dismiss(self) -> None:
        self._items.clear()

    def items(self, limit: Optional[int] = None) -> list[Notification]:
        """Get notifications, newest first."""
        newest_first = list(reversed(self._items))
        return newest_first[:limit] if limit is not None else newest_first

    def __len__(self) -> int:
        return len(self._items)
