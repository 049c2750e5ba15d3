"""Notification commands. Every command is scoped to the notification's owner."""

from .manage_notifications import (
    MarkNotificationReadCommand,
    MarkNotificationReadHandler,
    MarkAllNotificationsReadCommand,
    MarkAllNotificationsReadHandler,
    DeleteNotificationCommand,
    DeleteNotificationHandler,
    DismissThreadCommand,
    DismissThreadHandler,
)

__all__ = [
    "MarkNotificationReadCommand",
    "MarkNotificationReadHandler",
    "MarkAllNotificationsReadCommand",
    "MarkAllNotificationsReadHandler",
    "DeleteNotificationCommand",
    "DeleteNotificationHandler",
    "DismissThreadCommand",
    "DismissThreadHandler",
]
