"""Notification queries."""

from .list_notifications import (
    ListNotificationsQuery,
    ListNotificationsHandler,
    GetUnreadNotificationCountQuery,
    GetUnreadNotificationCountHandler,
)

__all__ = [
    "ListNotificationsQuery",
    "ListNotificationsHandler",
    "GetUnreadNotificationCountQuery",
    "GetUnreadNotificationCountHandler",
]
