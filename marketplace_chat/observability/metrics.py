"""
Prometheus Metrics for the messaging backend.

DATA FLOW:
    This file                  presentation/api/metrics.py         Observability Stack
    ─────────                  ────────────────────────────         ───────────────────
    Define metrics ──────────► /metrics endpoint ──────────────►   Prometheus ──► Grafana

METRIC TYPES:
    - Gauge: Value goes up/down (e.g. open feed subscriptions)
    - Counter: Value only goes up (e.g. messages sent)
"""

from prometheus_client import (
    Gauge,
    Counter,
    generate_latest,
    CONTENT_TYPE_LATEST,
)


# =============================================================================
# METRICS DEFINITIONS
# =============================================================================
MESSAGES_SENT_TOTAL = Counter(
    "chat_messages_sent_total",
    "Total number of messages persisted",
    ["with_attachment"],
)

MESSAGES_MARKED_READ_TOTAL = Counter(
    "chat_messages_marked_read_total",
    "Total number of messages flipped from unread to read",
)

NOTIFICATIONS_TOTAL = Counter(
    "chat_notifications_total",
    "Notifications delivered by type and channel",
    ["type", "channel"],
)

NOTIFICATION_FAILURES_TOTAL = Counter(
    "chat_notification_failures_total",
    "Notification dispatches that failed and were skipped",
    ["type"],
)

FEED_EVENTS_TOTAL = Counter(
    "chat_feed_events_total",
    "Change feed events received",
    ["table", "type"],
)

ACTIVE_SUBSCRIPTIONS = Gauge(
    "chat_active_subscriptions",
    "Number of live change feed subscriptions",
)

ERRORS_TOTAL = Counter(
    "chat_errors_total",
    "Total number of errors by type",
    ["error_type"],
)


# =============================================================================
# LABEL CONSTANTS (avoid hardcoding strings throughout codebase)
# =============================================================================
class MetricsErrorType:
    """Error type labels for chat_errors_total metric."""

    ACCESS_DENIED = "access_denied"
    VALIDATION_FAILED = "validation_failed"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    UPLOAD_FAILED = "upload_failed"
    SIGNED_URL_FAILED = "signed_url_failed"
    FEED_DISCONNECTED = "feed_disconnected"
    FEED_HANDLER_FAILED = "feed_handler_failed"
    FEED_CONSUMER_LAGGING = "feed_consumer_lagging"


class NotificationChannel:
    IN_APP = "in_app"
    PUSH = "push"


# =============================================================================
# RECORDING FUNCTIONS
# =============================================================================
def increment_messages_sent(with_attachment: bool):
    """Call after a message is persisted. Integration point: SendMessageHandler"""
    MESSAGES_SENT_TOTAL.labels(with_attachment=str(with_attachment).lower()).inc()


def increment_messages_marked_read(count: int):
    """Integration point: MarkConversationReadHandler"""
    if count > 0:
        MESSAGES_MARKED_READ_TOTAL.inc(count)


def increment_notification(type: str, channel: str):
    """Integration point: NotificationDispatcher"""
    NOTIFICATIONS_TOTAL.labels(type=type, channel=channel).inc()


def increment_notification_failure(type: str):
    """Integration point: NotificationDispatcher (failure isolation path)"""
    NOTIFICATION_FAILURES_TOTAL.labels(type=type).inc()


def increment_feed_event(table: str, type: str):
    """Integration point: PostgresChangeFeed listener loop"""
    FEED_EVENTS_TOTAL.labels(table=table, type=type).inc()


def increment_active_subscriptions():
    ACTIVE_SUBSCRIPTIONS.inc()


def decrement_active_subscriptions():
    ACTIVE_SUBSCRIPTIONS.dec()


def increment_error(error_type: str):
    """
    Call to record an error occurrence.

    Args:
        error_type: One of MetricsErrorType
    """
    ERRORS_TOTAL.labels(error_type=error_type).inc()


# =============================================================================
# HELPER FOR /metrics ENDPOINT
# =============================================================================
def get_metrics_content():
    """
    Generate Prometheus metrics output.

    Called by: presentation/api/metrics.py

    Returns:
        Tuple of (content_bytes, content_type_string)
    """
    return generate_latest(), CONTENT_TYPE_LATEST


# =============================================================================
# EXPORTS
# =============================================================================
__all__ = [
    "increment_messages_sent",
    "increment_messages_marked_read",
    "increment_notification",
    "increment_notification_failure",
    "increment_feed_event",
    "increment_active_subscriptions",
    "decrement_active_subscriptions",
    "increment_error",
    "get_metrics_content",
    "MetricsErrorType",
    "NotificationChannel",
]
