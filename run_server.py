"""
Entry point for running the notification server with uvicorn.

Protocol-level keep-alive (ping frames and the pong timeout that closes
stale connections) is handled by uvicorn using the heartbeat settings.
"""

import logging

import uvicorn

from sup_notifier.settings import app_settings
from sup_notifier.uvicorn_filters import ExcludeMetricsFilter


def main() -> None:
    logging.getLogger("uvicorn.access").addFilter(ExcludeMetricsFilter())

    uvicorn.run(
        "sup_notifier:application",
        factory=True,
        host=app_settings.HOST,
        port=app_settings.PORT,
        ws_ping_interval=app_settings.HEARTBEAT_INTERVAL_SECONDS,
        ws_ping_timeout=app_settings.WS_PING_TIMEOUT_SECONDS,
        # per-message deflate stays off for the notification channel
        ws_per_message_deflate=False,
    )


if __name__ == "__main__":
    main()
