"""Status notifications for the swap flow."""

from confswap.notifications.feed import (
    Notification,
    NotificationFeed,
    NotificationLevel,
    Notifier,
)

__all__ = ["Notification", "NotificationFeed", "NotificationLevel", "Notifier"]
