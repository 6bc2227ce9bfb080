"""
Prometheus metrics for the notification channel.

This module defines metrics for tracking WebSocket connections,
registrations, liveness checks and notification delivery.
"""

from sup_notifier.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_gauge,
)

# Connection Metrics
ws_connections_active = _get_or_create_gauge(
    "ws_connections_active", "Number of open notification WebSocket connections"
)

ws_connections_total = _get_or_create_counter(
    "ws_connections_total",
    "Total notification WebSocket connections",
    ["status"],  # accepted, closed, errored
)

ws_registrations_total = _get_or_create_counter(
    "ws_registrations_total",
    "Total registration messages processed",
    ["outcome"],  # registered, replaced
)

ws_messages_received_total = _get_or_create_counter(
    "ws_messages_received_total", "Total WebSocket messages received"
)

ws_messages_invalid_total = _get_or_create_counter(
    "ws_messages_invalid_total", "Total malformed WebSocket messages ignored"
)

ws_liveness_probes_total = _get_or_create_counter(
    "ws_liveness_probes_total",
    "Total liveness checks of open connections",
    ["outcome"],  # alive, stale
)

# Delivery Metrics
notifications_sent_total = _get_or_create_counter(
    "notifications_sent_total",
    "Total notifications written to a connection",
    ["mode"],  # direct, broadcast
)

notification_send_failures_total = _get_or_create_counter(
    "notification_send_failures_total",
    "Total notification writes that failed",
    ["mode"],
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
