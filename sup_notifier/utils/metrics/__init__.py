"""
Prometheus metrics definitions.

All metrics are re-exported here so callers can import them from one place:

    from sup_notifier.utils.metrics import ws_connections_active
"""

from sup_notifier.utils.metrics.websocket import (
    notification_send_failures_total,
    notifications_sent_total,
    ws_connections_active,
    ws_connections_total,
    ws_liveness_probes_total,
    ws_messages_invalid_total,
    ws_messages_received_total,
    ws_registrations_total,
)

__all__ = [
    "ws_connections_active",
    "ws_connections_total",
    "ws_registrations_total",
    "ws_messages_received_total",
    "ws_messages_invalid_total",
    "ws_liveness_probes_total",
    "notifications_sent_total",
    "notification_send_failures_total",
]
